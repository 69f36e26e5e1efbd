from flask import Blueprint, jsonify, request

from ...errors import Forbidden, NotFound
from ...extensions import db
from ...models.user import User
from ...schemas.auth import ProfileUpdateSchema
from ...security import require_user_id
from ...timeutil import isoformat
from ..auth.otp import email_allowed
from .activity import activity_to_dict, list_activities, record_activity

bp = Blueprint("users", __name__, url_prefix="/users")


def _user_to_dict(u: User) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "fullName": u.full_name,
        "phone": u.phone,
        "avatarUrl": u.avatar_url,
        "twoFactorEnabled": bool(u.two_factor_enabled),
        "lastLoginAt": isoformat(u.last_login_at),
        "createdAt": isoformat(u.created_at),
        "updatedAt": isoformat(u.updated_at),
    }


def _me() -> User:
    user = db.session.get(User, require_user_id())
    if user is None:
        raise NotFound("User not found")
    return user


@bp.get("/me")
def get_me():
    return jsonify({"user": _user_to_dict(_me())})


@bp.patch("/me")
def update_me():
    """Body JSON: any of fullName, phone, avatarUrl, twoFactorEnabled."""
    user = _me()
    data = ProfileUpdateSchema().load(request.get_json(silent=True) or {})
    # Login codes only go to institutional addresses
    if data.get("two_factor_enabled") and not email_allowed(user.email):
        raise Forbidden("Two-factor login requires an institutional email address")
    if "full_name" in data:
        user.full_name = data["full_name"].strip()
    if "phone" in data:
        user.phone = (data["phone"] or "").strip() or None
    if "avatar_url" in data:
        user.avatar_url = data["avatar_url"] or None
    if "two_factor_enabled" in data and bool(data["two_factor_enabled"]) != bool(user.two_factor_enabled):
        user.two_factor_enabled = bool(data["two_factor_enabled"])
        state = "enabled" if user.two_factor_enabled else "disabled"
        record_activity(user.id, "two_factor_" + state, f"Two-factor login {state}")
    db.session.commit()
    return jsonify({"user": _user_to_dict(user)})


@bp.get("/me/activities")
def my_activities():
    uid = require_user_id()
    try:
        limit = int(request.args.get("limit", 50))
    except ValueError:
        limit = 50
    return jsonify({"activities": [activity_to_dict(a) for a in list_activities(uid, limit)]})
