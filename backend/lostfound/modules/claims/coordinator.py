"""Who may claim a found item, and what a claim unlocks.

Contact details are revealed to any user holding a claim on the item, whatever
its status; the permission is derived at read time from the claim row.
"""
from __future__ import annotations

import logging

from ...errors import Forbidden, InvalidOperation, NotFound
from ...extensions import db
from ...models.claim import Claim
from ...models.item import Item
from ...models.user import User
from ..items.registry import get_item, mark_claimed
from ..notifications.dispatcher import notify, publish_notifications
from ..users.activity import record_activity

logger = logging.getLogger(__name__)

# The only status changes a claim ever makes, both performed by the item owner
_ALLOWED = {("pending", "approved"), ("pending", "rejected")}


def get_claim(claim_id: int) -> Claim:
    claim = db.session.get(Claim, claim_id)
    if claim is None:
        raise NotFound("Claim not found")
    return claim


def require_participant(claim: Claim, user_id: int) -> None:
    if int(user_id) not in claim.participant_ids:
        raise Forbidden("Only the item owner and the claimer can access this claim")


def other_participant(claim: Claim, user_id: int) -> int:
    owner_id, claimer_id = claim.participant_ids
    return claimer_id if int(user_id) == owner_id else owner_id


def submit_claim(item_id: int, claimer_id: int, message: str) -> Claim:
    item = get_item(item_id)
    if item.kind != "found":
        raise InvalidOperation("Only found items can be claimed")
    if int(item.owner_id) == int(claimer_id):
        raise Forbidden("You cannot claim your own item")
    if item.status not in ("pending", "claimed"):
        raise InvalidOperation(f"This item is {item.status} and can no longer be claimed")

    existing = Claim.query.filter_by(item_id=item.id, claimer_id=int(claimer_id)).first()
    if existing is not None:
        raise InvalidOperation("You have already submitted a claim for this item")

    claim = Claim(item_id=item.id, claimer_id=int(claimer_id), message=message, status="pending")
    db.session.add(claim)
    db.session.flush()

    n = notify(
        item.owner_id,
        "claim",
        "New claim received",
        f"Someone has claimed your found item '{item.title}'.",
        item_id=item.id,
        payload={"action": "submitted", "claimId": int(claim.id)},
    )
    record_activity(claimer_id, "claim_submitted", f"Claimed '{item.title}'", {"itemId": int(item.id), "claimId": int(claim.id)})
    db.session.commit()
    publish_notifications([n])
    logger.info("Claim %s submitted on item %s by user %s", claim.id, item.id, claimer_id)
    return claim


def update_claim_status(claim_id: int, new_status: str, requesting_user_id: int) -> Claim:
    claim = get_claim(claim_id)
    item = claim.item
    if int(item.owner_id) != int(requesting_user_id):
        raise Forbidden("Only the item owner can decide on a claim")
    if (claim.status, new_status) not in _ALLOWED:
        raise Forbidden(f"Claim cannot move from {claim.status} to {new_status}")

    claim.status = new_status
    if new_status == "approved":
        mark_claimed(item)
        title = "Your claim has been approved"
        body = f"Your claim for '{item.title}' has been approved by the finder."
    else:
        title = "Your claim has been rejected"
        body = f"Your claim for '{item.title}' was rejected by the finder."

    n = notify(
        claim.claimer_id,
        "claim",
        title,
        body,
        item_id=item.id,
        payload={"action": new_status, "claimId": int(claim.id)},
    )
    record_activity(
        requesting_user_id,
        f"claim_{new_status}",
        f"{new_status.capitalize()} a claim on '{item.title}'",
        {"itemId": int(item.id), "claimId": int(claim.id)},
    )
    db.session.commit()
    publish_notifications([n])
    logger.info("Claim %s %s by owner %s", claim.id, new_status, requesting_user_id)
    return claim


def can_reveal_contact(item: Item, user_id: int | None) -> bool:
    if user_id is None:
        return False
    if int(item.owner_id) == int(user_id):
        return True
    return (
        db.session.query(Claim.id)
        .filter(Claim.item_id == item.id, Claim.claimer_id == int(user_id))
        .first()
        is not None
    )


def contact_for(item_id: int, user_id: int) -> dict:
    item = get_item(item_id)
    if not can_reveal_contact(item, user_id):
        raise Forbidden("Submit a claim to see the reporter's contact details")
    owner: User = item.owner
    return {
        "fullName": owner.full_name,
        "email": owner.email,
        "phone": owner.phone,
        "contactInfo": item.contact_info,
    }


def list_claims(user_id: int, role: str = "mine", item_id: int | None = None) -> list[Claim]:
    q = Claim.query
    if role == "received":
        q = q.join(Item, Claim.item_id == Item.id).filter(Item.owner_id == int(user_id))
    else:
        q = q.filter(Claim.claimer_id == int(user_id))
    if item_id is not None:
        q = q.filter(Claim.item_id == int(item_id))
    return q.order_by(Claim.created_at.desc(), Claim.id.desc()).all()
