from sqlalchemy import Index, func
from ..extensions import db
from .types import BigId, appointment_status_enum


class Appointment(db.Model):
    __tablename__ = "appointments"

    id = db.Column(BigId, primary_key=True)
    claim_id = db.Column(db.BigInteger, db.ForeignKey("claims.id", ondelete="CASCADE"), nullable=False)
    scheduled_time = db.Column(db.DateTime(timezone=True), nullable=False)
    location = db.Column(db.String(200), nullable=False)
    notes = db.Column(db.Text)
    created_by = db.Column(db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = db.Column(appointment_status_enum, nullable=False, default="pending", server_default="pending")
    reminder_sent_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    claim = db.relationship("Claim", back_populates="appointments")

    __table_args__ = (
        Index("idx_appointments_claim", "claim_id"),
        Index("idx_appointments_status_time", "status", "scheduled_time"),
    )
