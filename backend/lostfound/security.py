from __future__ import annotations

import os
from typing import Optional
from flask import current_app, g, has_app_context
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from .errors import AuthenticationRequired

AUTH_SALT = "auth-token"
OTP_PENDING_SALT = "otp-pending"


def _secret() -> str:
    if has_app_context():
        return current_app.config.get("SECRET_KEY") or "change-me"
    return os.getenv("SECRET_KEY", "change-me")


def _serializer(salt: str) -> URLSafeTimedSerializer:
    # Salt provides namespace isolation: an OTP-pending token is never a session token
    return URLSafeTimedSerializer(secret_key=_secret(), salt=salt)


def _max_age(key: str, default: int) -> int:
    if has_app_context():
        try:
            return int(current_app.config.get(key, default))
        except (TypeError, ValueError):
            return default
    return default


def issue_token(user_id: int) -> str:
    """Issue a signed session token for a user. Payload is minimal: {"id": int}."""
    return _serializer(AUTH_SALT).dumps({"id": int(user_id)})


def verify_token(token: str) -> Optional[int]:
    """Return the user id carried by a valid session token, else None.

    Max age follows AUTH_TOKEN_MAX_AGE seconds (default 30 days).
    """
    return _loads(token, AUTH_SALT, _max_age("AUTH_TOKEN_MAX_AGE", 60 * 60 * 24 * 30))


def issue_pending_token(user_id: int) -> str:
    """Token proving the password step succeeded while the second factor is outstanding."""
    return _serializer(OTP_PENDING_SALT).dumps({"id": int(user_id)})


def verify_pending_token(token: str) -> Optional[int]:
    minutes = _max_age("OTP_TTL_MINUTES", 10)
    return _loads(token, OTP_PENDING_SALT, minutes * 60)


def _loads(token: str, salt: str, max_age: int) -> Optional[int]:
    try:
        data = _serializer(salt).loads(token, max_age=max_age)
        if isinstance(data, dict) and data.get("id") is not None:
            return int(data["id"])
        return None
    except (BadSignature, SignatureExpired, ValueError, TypeError):
        return None


def current_user_id() -> Optional[int]:
    """Authenticated principal loaded by the API before_request hook, if any."""
    uid = getattr(g, "current_user_id", None)
    try:
        return int(uid) if uid is not None else None
    except (TypeError, ValueError):
        return None


def require_user_id() -> int:
    uid = current_user_id()
    if uid is None:
        raise AuthenticationRequired()
    return uid
