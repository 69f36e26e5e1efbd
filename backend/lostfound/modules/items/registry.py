from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import or_

from ...errors import Forbidden, InvalidOperation, NotFound
from ...extensions import db
from ...models.claim import Claim
from ...models.item import Item
from ...models.types import ITEM_STATUSES
from ...timeutil import utcnow
from ..matches.engine import run_match_pass_safely
from ..users.activity import record_activity

logger = logging.getLogger(__name__)

# (from, to) pairs and who may perform them
_TRANSITIONS = {
    ("pending", "claimed"): "pipeline",
    ("pending", "returned"): "owner",
    ("claimed", "returned"): "owner",
    ("pending", "expired"): "system",
}

_EDITABLE_FIELDS = ("category", "title", "description", "location", "event_date", "image_ref", "contact_info", "reward")


def get_item(item_id: int) -> Item:
    item = db.session.get(Item, item_id)
    if item is None:
        raise NotFound("Item not found")
    return item


def _require_owner(item: Item, actor_id: int) -> None:
    if int(item.owner_id) != int(actor_id):
        raise Forbidden("Only the item owner may do this")


def create_item(owner_id: int, fields: dict[str, Any]) -> Item:
    """Insert a new report, then run the best-effort matching pass once."""
    item = Item(owner_id=int(owner_id), status="pending", **fields)
    db.session.add(item)
    db.session.flush()
    record_activity(
        owner_id,
        "item_reported",
        f"Reported {item.kind} item '{item.title}'",
        {"itemId": int(item.id), "kind": item.kind},
    )
    db.session.commit()
    logger.info("Item %s (%s) created by user %s", item.id, item.kind, owner_id)

    run_match_pass_safely(item)
    return item


def update_item(item_id: int, actor_id: int, fields: dict[str, Any]) -> Item:
    item = get_item(item_id)
    _require_owner(item, actor_id)
    if item.status in ("returned", "expired"):
        raise InvalidOperation(f"A {item.status} item can no longer be edited")
    for key in _EDITABLE_FIELDS:
        if key in fields:
            setattr(item, key, fields[key])
    db.session.commit()
    return item


def _transition(item: Item, new_status: str, role: str) -> None:
    if new_status not in ITEM_STATUSES:
        raise InvalidOperation(f"Unknown item status '{new_status}'")
    allowed = _TRANSITIONS.get((item.status, new_status))
    if allowed != role:
        raise InvalidOperation(f"Cannot move item from {item.status} to {new_status}")
    item.status = new_status


def mark_claimed(item: Item) -> bool:
    """Advance a pending item to claimed on claim approval. Caller commits."""
    if item.status != "pending":
        return False
    _transition(item, "claimed", "pipeline")
    return True


def mark_returned(item_id: int, actor_id: int) -> Item:
    item = get_item(item_id)
    _require_owner(item, actor_id)
    _transition(item, "returned", "owner")
    record_activity(actor_id, "item_returned", f"Marked '{item.title}' as returned", {"itemId": int(item.id)})
    db.session.commit()
    logger.info("Item %s marked returned by owner %s", item.id, actor_id)
    return item


def expire_stale_items(max_age_days: int, now: datetime | None = None) -> int:
    """Expire old pending reports. Items with any claim stay open for their claimers."""
    cutoff = (now or utcnow()) - timedelta(days=max_age_days)
    claimed = db.session.query(Claim.id).filter(Claim.item_id == Item.id).exists()
    stale = Item.query.filter(Item.status == "pending", Item.created_at < cutoff, ~claimed).all()
    for item in stale:
        _transition(item, "expired", "system")
    db.session.commit()
    if stale:
        logger.info("Expired %d stale item(s)", len(stale))
    return len(stale)


def delete_item(item_id: int, actor_id: int) -> None:
    item = get_item(item_id)
    _require_owner(item, actor_id)
    has_claims = db.session.query(Claim.id).filter(Claim.item_id == item.id).first() is not None
    if has_claims:
        raise InvalidOperation("Items with claims cannot be deleted")
    db.session.delete(item)
    db.session.commit()


def list_items(
    *,
    kind: str | None = None,
    category: str | None = None,
    status: str | None = None,
    owner_id: int | None = None,
    q: str | None = None,
    limit: int = 20,
) -> list[Item]:
    query = Item.query
    if kind:
        query = query.filter(Item.kind == kind)
    if category:
        query = query.filter(Item.category == category)
    if status:
        query = query.filter(Item.status == status)
    if owner_id is not None:
        query = query.filter(Item.owner_id == owner_id)
    if q:
        like = f"%{q.strip()}%"
        query = query.filter(or_(Item.title.ilike(like), Item.description.ilike(like)))
    return (
        query.order_by(Item.created_at.desc(), Item.id.desc())
        .limit(max(1, min(100, limit)))
        .all()
    )
