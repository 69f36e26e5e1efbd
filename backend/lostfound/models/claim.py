from sqlalchemy import func, UniqueConstraint, Index
from ..extensions import db
from .types import BigId, claim_status_enum


class Claim(db.Model):
    __tablename__ = "claims"

    id = db.Column(BigId, primary_key=True)
    item_id = db.Column(db.BigInteger, db.ForeignKey("items.id"), nullable=False)
    claimer_id = db.Column(db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = db.Column(db.Text, nullable=False)
    status = db.Column(claim_status_enum, nullable=False, default="pending", server_default="pending")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    item = db.relationship("Item", back_populates="claims")
    claimer = db.relationship("User", back_populates="claims", foreign_keys=[claimer_id])
    messages = db.relationship("Message", back_populates="claim", lazy=True)
    appointments = db.relationship("Appointment", back_populates="claim", lazy=True)

    __table_args__ = (
        UniqueConstraint("item_id", "claimer_id", name="uq_claims_item_claimer"),
        Index("idx_claims_item", "item_id"),
        Index("idx_claims_claimer", "claimer_id"),
        Index("idx_claims_status", "status"),
    )

    @property
    def participant_ids(self) -> tuple[int, int]:
        """(item owner, claimer): the only two users allowed into this claim's chat and appointments."""
        return (int(self.item.owner_id), int(self.claimer_id))
