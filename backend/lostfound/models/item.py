from sqlalchemy import func, Index
from ..extensions import db
from .types import BigId, item_kind_enum, item_category_enum, item_status_enum


class Item(db.Model):
    __tablename__ = "items"

    id = db.Column(BigId, primary_key=True)
    owner_id = db.Column(db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    kind = db.Column(item_kind_enum, nullable=False)
    category = db.Column(item_category_enum, nullable=False)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    location = db.Column(db.String(200), nullable=False)
    event_date = db.Column(db.Date, nullable=False)
    image_ref = db.Column(db.String(512))
    contact_info = db.Column(db.String(255))
    reward = db.Column(db.String(120))
    status = db.Column(item_status_enum, nullable=False, default="pending", server_default="pending")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    owner = db.relationship("User", back_populates="items")
    # No delete cascade: an item with claims is never removed
    claims = db.relationship("Claim", back_populates="item", lazy=True)

    __table_args__ = (
        Index("idx_items_kind_status", "kind", "status"),
        Index("idx_items_owner", "owner_id"),
        Index("idx_items_created_at", "created_at"),
    )
