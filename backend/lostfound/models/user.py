from sqlalchemy import func, false
from ..extensions import db
from .types import BigId


class User(db.Model):
    """A user's profile. ``two_factor_enabled`` is read at the start of every login."""

    __tablename__ = "users"

    id = db.Column(BigId, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    full_name = db.Column(db.String(200), nullable=False)
    phone = db.Column(db.String(40))
    avatar_url = db.Column(db.String(512))
    password_hash = db.Column(db.Text)
    two_factor_enabled = db.Column(db.Boolean, nullable=False, default=False, server_default=false())
    last_login_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    items = db.relationship("Item", back_populates="owner", lazy=True)
    claims = db.relationship("Claim", back_populates="claimer", lazy=True)
    notifications = db.relationship(
        "Notification",
        back_populates="recipient",
        lazy=True,
        cascade="all, delete-orphan",
    )
