import logging

from flask import request, jsonify
from sqlalchemy import func
from werkzeug.security import generate_password_hash, check_password_hash

from ...errors import AuthenticationRequired, InvalidOperation, InvalidOrExpired
from ...extensions import db
from ...models.user import User
from ...schemas.auth import LoginSchema, OtpResendSchema, OtpVerifySchema, RegisterSchema
from ...security import issue_pending_token, issue_token, verify_pending_token
from . import bp
from .otp import generate_otp, redeem_otp

logger = logging.getLogger(__name__)


def _session_payload(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "fullName": user.full_name,
        "twoFactorEnabled": bool(user.two_factor_enabled),
        "token": issue_token(int(user.id)),
    }


def _touch_login(user: User) -> None:
    try:
        user.last_login_at = func.now()
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("Could not record last login for user %s", user.id)


@bp.post("/register")
def register():
    data = RegisterSchema().load(request.get_json(silent=True) or {})

    if User.query.filter_by(email=data["email"]).first():
        raise InvalidOperation("Email already in use")

    user = User(
        email=data["email"],
        full_name=data["full_name"].strip(),
        phone=(data.get("phone") or "").strip() or None,
        password_hash=generate_password_hash(data["password"]),
        two_factor_enabled=False,
    )
    db.session.add(user)
    db.session.commit()
    logger.info("Registered user %s", user.id)
    return jsonify(_session_payload(user)), 201


@bp.post("/login")
def login():
    """Password step. Profiles with the second factor enabled get a code by email
    and a short-lived pendingToken instead of a session token."""
    data = LoginSchema().load(request.get_json(silent=True) or {})

    user = User.query.filter_by(email=data["email"]).first()
    if not user or not user.password_hash or not check_password_hash(user.password_hash, data["password"]):
        raise AuthenticationRequired("Invalid email or password")

    if user.two_factor_enabled:
        generate_otp(int(user.id), user.email)
        return jsonify({
            "otpRequired": True,
            "pendingToken": issue_pending_token(int(user.id)),
        })

    _touch_login(user)
    return jsonify(_session_payload(user))


def _pending_user(token: str) -> User:
    uid = verify_pending_token(token)
    user = db.session.get(User, uid) if uid is not None else None
    if user is None:
        # Same answer as a bad code: the login attempt is simply no longer valid
        raise InvalidOrExpired()
    return user


@bp.post("/otp/verify")
def verify_otp():
    data = OtpVerifySchema().load(request.get_json(silent=True) or {})
    user = _pending_user(data["pending_token"])
    redeem_otp(int(user.id), data["code"])
    _touch_login(user)
    return jsonify(_session_payload(user))


@bp.post("/otp/resend")
def resend_otp():
    data = OtpResendSchema().load(request.get_json(silent=True) or {})
    user = _pending_user(data["pending_token"])
    generate_otp(int(user.id), user.email)
    return jsonify({"otpRequired": True, "pendingToken": issue_pending_token(int(user.id))})
