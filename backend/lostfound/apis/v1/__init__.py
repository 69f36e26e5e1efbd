from flask import Blueprint, Flask, g, request

from ...modules.items.routes import bp as items_bp
from ...modules.claims.routes import bp as claims_bp
from ...modules.chat.routes import bp as chat_bp
from ...modules.appointments.routes import bp as appointments_bp
from ...modules.auth import bp as auth_bp
from ...modules.matches.routes import bp as matches_bp
from ...modules.users.routes import bp as users_bp
from ...modules.notifications.routes import bp as notifications_bp
from ...modules.public.routes import bp as public_bp


def register_api(app: Flask) -> None:
    api_v1 = Blueprint("api_v1", __name__, url_prefix="/api/v1")

    # Auth context loader. Only a signed bearer token identifies the caller;
    # no header or parameter lets a request act as another user.
    @api_v1.before_request  # type: ignore
    def _load_current_user():  # pragma: no cover - simple request context helper
        from ...extensions import db
        from ...models.user import User  # local import to avoid circulars
        from ...security import verify_token
        uid: int | None = None

        auth = request.headers.get("Authorization") or ""
        if auth.lower().startswith("bearer "):
            uid = verify_token(auth[7:].strip())
        user_obj = db.session.get(User, uid) if uid is not None else None
        g.current_user = user_obj  # type: ignore[attr-defined]
        g.current_user_id = int(user_obj.id) if user_obj else None  # type: ignore[attr-defined]

    # Mount feature blueprints
    api_v1.register_blueprint(auth_bp)
    api_v1.register_blueprint(users_bp)
    api_v1.register_blueprint(items_bp)
    api_v1.register_blueprint(matches_bp)
    api_v1.register_blueprint(claims_bp)
    api_v1.register_blueprint(chat_bp)
    api_v1.register_blueprint(appointments_bp)
    api_v1.register_blueprint(notifications_bp)
    api_v1.register_blueprint(public_bp)

    app.register_blueprint(api_v1)
