from sqlalchemy import Index, func
from ..extensions import db
from .types import BigId


class Message(db.Model):
    __tablename__ = "messages"

    id = db.Column(BigId, primary_key=True)
    claim_id = db.Column(db.BigInteger, db.ForeignKey("claims.id", ondelete="CASCADE"), nullable=False)
    sender_id = db.Column(db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = db.Column(db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    claim = db.relationship("Claim", back_populates="messages")

    __table_args__ = (
        Index("idx_messages_claim_created", "claim_id", "created_at"),
    )
