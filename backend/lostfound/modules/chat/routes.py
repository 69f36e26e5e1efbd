from flask import Blueprint, jsonify, request

from ...schemas.message import MessageCreateSchema
from ...security import require_user_id
from ..claims.coordinator import get_claim, require_participant
from ..notifications.stream import sse_response
from . import channel

bp = Blueprint("chat", __name__, url_prefix="/claims")


@bp.get("/<int:claim_id>/messages")
def list_messages(claim_id: int):
    rows = channel.list_messages(claim_id, require_user_id())
    return jsonify({"messages": [channel.message_to_dict(m) for m in rows]})


@bp.post("/<int:claim_id>/messages")
def send_message(claim_id: int):
    """Body JSON: { content }. The receiver is the other participant of the claim."""
    uid = require_user_id()
    data = MessageCreateSchema().load(request.get_json(silent=True) or {})
    msg = channel.send_message(claim_id, uid, data["content"])
    return jsonify({"message": channel.message_to_dict(msg)}), 201


@bp.get("/<int:claim_id>/messages/stream")
def stream_messages(claim_id: int):
    """SSE stream of new messages on one claim, participants only."""
    require_participant(get_claim(claim_id), require_user_id())
    return sse_response(channel.TABLE, lambda row: row.get("claimId") == claim_id, "message")
