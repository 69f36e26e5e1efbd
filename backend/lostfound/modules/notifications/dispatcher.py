from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy import func, update

from ...errors import Forbidden, NotFound
from ...extensions import db
from ...models.notification import Notification
from ...timeutil import isoformat
from .bus import publish

logger = logging.getLogger(__name__)

TABLE = "notifications"


def notification_to_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "recipientUserId": n.user_id,
        "itemId": n.item_id,
        "relatedItemId": n.related_item_id,
        "kind": n.kind,
        "title": n.title,
        "message": n.message,
        "payload": n.payload,
        "read": bool(n.read),
        "createdAt": isoformat(n.created_at),
    }


def notify(
    recipient_id: int,
    kind: str,
    title: str,
    message: str,
    *,
    item_id: int,
    related_item_id: int | None = None,
    payload: dict[str, Any] | None = None,
) -> Notification:
    """Stage a notification row in the current session. The caller commits."""
    n = Notification(
        user_id=int(recipient_id),
        kind=kind,
        title=title,
        message=message,
        item_id=int(item_id),
        related_item_id=int(related_item_id) if related_item_id is not None else None,
        payload=payload or {},
    )
    db.session.add(n)
    return n


def publish_notifications(rows: Iterable[Notification]) -> None:
    """Push committed notification rows to realtime subscribers. Never raises."""
    for n in rows:
        try:
            publish(TABLE, notification_to_dict(n))
        except Exception:
            logger.exception("Failed to publish notification %s", getattr(n, "id", None))


def list_notifications(user_id: int, *, unread_only: bool = False, limit: int = 20) -> list[Notification]:
    q = Notification.query.filter(Notification.user_id == user_id)
    if unread_only:
        q = q.filter(Notification.read.is_(False))
    return (
        q.order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(max(1, min(100, limit)))
        .all()
    )


def unread_count(user_id: int) -> int:
    return int(
        db.session.query(func.count(Notification.id))
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .scalar()
        or 0
    )


def mark_notification_read(notification_id: int, user_id: int) -> Notification:
    n = db.session.get(Notification, notification_id)
    if n is None:
        raise NotFound("Notification not found")
    if int(n.user_id) != int(user_id):
        raise Forbidden("Not allowed to modify this notification")
    if not n.read:
        n.read = True
        db.session.commit()
    return n


def mark_all_read(user_id: int) -> int:
    result = db.session.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
        .values(read=True)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return int(result.rowcount or 0)
