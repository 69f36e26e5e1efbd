from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from ...extensions import db
from ...models.activity import Activity
from ...timeutil import isoformat, utcnow


def record_activity(user_id: int, activity_type: str, description: str, meta: dict[str, Any] | None = None) -> Activity:
    """Stage an entry in the user's activity feed; committed with the caller's transaction."""
    a = Activity(user_id=int(user_id), activity_type=activity_type, description=description, meta=meta or {})
    db.session.add(a)
    return a


def activity_to_dict(a: Activity) -> dict:
    return {
        "id": a.id,
        "type": a.activity_type,
        "description": a.description,
        "metadata": a.meta,
        "createdAt": isoformat(a.created_at),
    }


def list_activities(user_id: int, limit: int = 50) -> list[Activity]:
    return (
        Activity.query.filter(Activity.user_id == user_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(max(1, min(200, limit)))
        .all()
    )


def purge_old_activities(retention_days: int, now: datetime | None = None) -> int:
    cutoff = (now or utcnow()) - timedelta(days=retention_days)
    deleted = Activity.query.filter(Activity.created_at < cutoff).delete(synchronize_session=False)
    db.session.commit()
    return int(deleted or 0)
