"""Email one-time passwords for the login second factor.

A code is redeemable only while it is the newest unverified, unexpired code
for its user. Expiry is checked at redemption time; the purge job is
housekeeping only.
"""
from __future__ import annotations

import hmac
import logging
import secrets
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy import or_, update

from ...errors import DependencyFailure, Forbidden, InvalidOrExpired
from ...extensions import db
from ...integrations.email.client import send_email
from ...models.otp_code import OtpCode
from ...timeutil import utcnow

logger = logging.getLogger(__name__)

CODE_DIGITS = 6


def _now() -> datetime:
    return utcnow()


def new_code() -> str:
    return f"{secrets.randbelow(10 ** CODE_DIGITS):0{CODE_DIGITS}d}"


def email_allowed(email: str) -> bool:
    domain = (current_app.config.get("OTP_EMAIL_DOMAIN") or "").strip().lower().lstrip("@")
    if not domain:
        return True
    return (email or "").strip().lower().endswith("@" + domain)


def _otp_email_html(code: str, ttl_minutes: int) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        "<h2>Your Login OTP</h2>"
        "<p>Use this code to complete your login:</p>"
        '<div style="background-color: #f3f4f6; padding: 20px; text-align: center; font-size: 32px; '
        f'font-weight: bold; letter-spacing: 8px;">{code}</div>'
        f'<p style="color: #6b7280; margin-top: 20px;">This code will expire in {ttl_minutes} minutes.</p>'
        "</div>"
    )


def generate_otp(user_id: int, email: str) -> OtpCode:
    """Persist a fresh code and email it; nothing is kept if the email cannot be sent."""
    if not email_allowed(email):
        raise Forbidden("Only institutional email addresses can receive login codes")

    ttl = int(current_app.config.get("OTP_TTL_MINUTES", 10))
    code = new_code()
    row = OtpCode(user_id=int(user_id), code=code, expires_at=_now() + timedelta(minutes=ttl), verified=False)
    db.session.add(row)
    db.session.flush()

    if not send_email(email, "Your login code", _otp_email_html(code, ttl)):
        db.session.rollback()
        logger.error("Login code email failed for user %s", user_id)
        raise DependencyFailure("Could not send the login code email. Please try again.")

    db.session.commit()
    logger.info("Login code issued for user %s", user_id)
    return row


def _claim_row(otp_id: int, now: datetime) -> bool:
    """Flip verified false -> true in one conditional UPDATE; True only for the single winner."""
    result = db.session.execute(
        update(OtpCode)
        .where(
            OtpCode.id == otp_id,
            OtpCode.verified.is_(False),
            OtpCode.expires_at > now,
        )
        .values(verified=True)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return result.rowcount == 1


def redeem_otp(user_id: int, code: str) -> None:
    """Accept ``code`` for ``user_id`` at most once; any failure is InvalidOrExpired."""
    now = _now()
    candidate = (
        OtpCode.query
        .filter(
            OtpCode.user_id == int(user_id),
            OtpCode.verified.is_(False),
            OtpCode.expires_at > now,
        )
        .order_by(OtpCode.created_at.desc(), OtpCode.id.desc())
        .first()
    )
    supplied = (code or "").strip()
    if candidate is None or not hmac.compare_digest(candidate.code.encode(), supplied.encode()):
        raise InvalidOrExpired()
    if not _claim_row(candidate.id, now):
        raise InvalidOrExpired()
    logger.info("Login code redeemed for user %s", user_id)


def purge_expired_otps(now: datetime | None = None) -> int:
    now = now or _now()
    deleted = (
        OtpCode.query
        .filter(or_(OtpCode.verified.is_(True), OtpCode.expires_at <= now))
        .delete(synchronize_session=False)
    )
    db.session.commit()
    return int(deleted or 0)
