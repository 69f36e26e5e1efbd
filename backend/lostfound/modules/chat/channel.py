from __future__ import annotations

import logging

from ...errors import InvalidOperation
from ...extensions import db
from ...models.message import Message
from ...timeutil import isoformat
from ..claims.coordinator import get_claim, other_participant, require_participant
from ..notifications.bus import publish
from ..notifications.dispatcher import notify, publish_notifications

logger = logging.getLogger(__name__)

TABLE = "messages"
MAX_LENGTH = 2000


def message_to_dict(m: Message) -> dict:
    return {
        "id": m.id,
        "claimId": m.claim_id,
        "senderId": m.sender_id,
        "receiverId": m.receiver_id,
        "content": m.content,
        "createdAt": isoformat(m.created_at),
    }


def send_message(claim_id: int, sender_id: int, content: str) -> Message:
    claim = get_claim(claim_id)
    require_participant(claim, sender_id)
    text = (content or "").strip()
    if not text:
        raise InvalidOperation("Message cannot be empty")
    if len(text) > MAX_LENGTH:
        raise InvalidOperation(f"Message is longer than {MAX_LENGTH} characters")

    receiver_id = other_participant(claim, sender_id)
    msg = Message(claim_id=claim.id, sender_id=int(sender_id), receiver_id=receiver_id, content=text)
    db.session.add(msg)
    n = notify(
        receiver_id,
        "message",
        "New message",
        f"You have a new message about '{claim.item.title}'.",
        item_id=claim.item_id,
        payload={"claimId": int(claim.id)},
    )
    db.session.commit()

    # Realtime push is best-effort; the row is already persisted
    try:
        publish(TABLE, message_to_dict(msg))
    except Exception:
        logger.exception("Failed to publish message %s", msg.id)
    publish_notifications([n])
    return msg


def list_messages(claim_id: int, user_id: int) -> list[Message]:
    claim = get_claim(claim_id)
    require_participant(claim, user_id)
    return (
        Message.query.filter(Message.claim_id == claim.id)
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )
