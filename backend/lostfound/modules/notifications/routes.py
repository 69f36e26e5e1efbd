from flask import Blueprint, jsonify, request

from ...security import require_user_id
from . import dispatcher
from .stream import sse_response

bp = Blueprint("notifications", __name__, url_prefix="/notifications")


@bp.get("")
def list_notifications():
    """Newest first. Query params: unread=1 for unread only, limit (default 20, max 100)."""
    uid = require_user_id()
    try:
        limit = int(request.args.get("limit", 20))
    except ValueError:
        limit = 20
    unread_only = request.args.get("unread") in ("1", "true", "yes")
    rows = dispatcher.list_notifications(uid, unread_only=unread_only, limit=limit)
    return jsonify({
        "notifications": [dispatcher.notification_to_dict(n) for n in rows],
        "unreadCount": dispatcher.unread_count(uid),
    })


@bp.patch("/<int:notif_id>/read")
def mark_read(notif_id: int):
    n = dispatcher.mark_notification_read(notif_id, require_user_id())
    return jsonify({"notification": dispatcher.notification_to_dict(n)})


@bp.post("/read-all")
def mark_all_read():
    return jsonify({"updated": dispatcher.mark_all_read(require_user_id())})


@bp.get("/stream")
def stream_notifications():
    """SSE stream of the caller's new notifications."""
    uid = require_user_id()
    return sse_response(dispatcher.TABLE, lambda row: row.get("recipientUserId") == uid, "notification")
