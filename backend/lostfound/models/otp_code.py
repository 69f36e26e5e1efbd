from sqlalchemy import Index, func, false
from ..extensions import db
from .types import BigId


class OtpCode(db.Model):
    """One second-factor attempt. Only ``verified`` ever changes, and only false -> true."""

    __tablename__ = "otp_codes"

    id = db.Column(BigId, primary_key=True)
    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    code = db.Column(db.String(6), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)
    verified = db.Column(db.Boolean, nullable=False, default=False, server_default=false())
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_otp_codes_user_verified", "user_id", "verified"),
        Index("idx_otp_codes_expires_at", "expires_at"),
    )
