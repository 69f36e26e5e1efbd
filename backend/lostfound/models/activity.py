from sqlalchemy import Index, func
from ..extensions import db
from .types import BigId, JsonDoc


class Activity(db.Model):
    __tablename__ = "activities"

    id = db.Column(BigId, primary_key=True)
    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    activity_type = db.Column(db.String(60), nullable=False)
    description = db.Column(db.Text, nullable=False)
    meta = db.Column("metadata", JsonDoc)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_activities_user_created", "user_id", "created_at"),
    )
