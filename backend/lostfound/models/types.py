from sqlalchemy.dialects.postgresql import JSONB

from ..extensions import db

# Enum types shared across models. Postgres gets native ENUM types, SQLite a VARCHAR.

ITEM_KINDS = ("lost", "found")
ITEM_CATEGORIES = (
    "electronics",
    "clothing",
    "accessories",
    "documents",
    "keys",
    "bags",
    "books",
    "jewelry",
    "sports",
    "other",
)
ITEM_STATUSES = ("pending", "claimed", "returned", "expired")
CLAIM_STATUSES = ("pending", "approved", "rejected")
APPOINTMENT_STATUSES = ("pending", "confirmed", "cancelled", "completed")
NOTIFICATION_KINDS = ("match", "claim", "appointment", "message")

item_kind_enum = db.Enum(*ITEM_KINDS, name="item_type")
item_category_enum = db.Enum(*ITEM_CATEGORIES, name="item_category")
item_status_enum = db.Enum(*ITEM_STATUSES, name="item_status")
claim_status_enum = db.Enum(*CLAIM_STATUSES, name="claim_status")
appointment_status_enum = db.Enum(*APPOINTMENT_STATUSES, name="appointment_status")
notification_kind_enum = db.Enum(*NOTIFICATION_KINDS, name="notification_kind")

# SQLite only autoincrements INTEGER PRIMARY KEY, not BIGINT
BigId = db.BigInteger().with_variant(db.Integer(), "sqlite")
JsonDoc = db.JSON().with_variant(JSONB(), "postgresql")
