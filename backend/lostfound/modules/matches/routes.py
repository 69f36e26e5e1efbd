from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...errors import ServiceError
from ...timeutil import isoformat
from ..items.registry import get_item
from .engine import suggest_matches

bp = Blueprint("matches", __name__, url_prefix="/matches")


@bp.get("/suggestions")
def suggestions_for_item():
    """Pending opposite-kind items whose titles resemble the given item, best first.

    Query params: itemId (required), limit (default 10, max 50)
    Returns: { suggestions: [ { score, candidate } ] } with score in [0, 1]
    """
    try:
        item_id = int(request.args.get("itemId"))
    except (TypeError, ValueError):
        raise ServiceError("Invalid itemId")
    try:
        limit = int(request.args.get("limit", 10))
    except (TypeError, ValueError):
        limit = 10

    base = get_item(item_id)
    out = []
    for m in suggest_matches(base, limit=limit):
        it = m.item
        out.append({
            "score": round(m.score, 4),
            "candidate": {
                "id": it.id,
                "kind": it.kind,
                "category": it.category,
                "title": it.title,
                "location": it.location,
                "eventDate": it.event_date.isoformat() if it.event_date else None,
                "status": it.status,
                "imageRef": it.image_ref,
                "createdAt": isoformat(it.created_at),
            },
        })
    return jsonify({"suggestions": out})
