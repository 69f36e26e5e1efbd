from sqlalchemy import Index, func, false
from ..extensions import db
from .types import BigId, JsonDoc, notification_kind_enum


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(BigId, primary_key=True)
    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    item_id = db.Column(db.BigInteger, db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    related_item_id = db.Column(db.BigInteger, db.ForeignKey("items.id", ondelete="CASCADE"))
    kind = db.Column(notification_kind_enum, nullable=False)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    payload = db.Column(JsonDoc)
    read = db.Column(db.Boolean, nullable=False, default=False, server_default=false())
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    recipient = db.relationship("User", back_populates="notifications")

    __table_args__ = (
        Index("idx_notifications_user_read", "user_id", "read"),
    )
