from flask import Blueprint, jsonify, request

from ...errors import ServiceError
from ...models.claim import Claim
from ...schemas.claim import ClaimCreateSchema, ClaimStatusSchema
from ...security import require_user_id
from ...timeutil import isoformat
from . import coordinator

bp = Blueprint("claims", __name__, url_prefix="/claims")


def _claim_to_dict(c: Claim) -> dict:
    item = c.item
    return {
        "id": c.id,
        "itemId": c.item_id,
        "claimerId": c.claimer_id,
        "message": c.message,
        "status": c.status,
        "createdAt": isoformat(c.created_at),
        "updatedAt": isoformat(c.updated_at),
        "item": {
            "id": item.id,
            "ownerId": item.owner_id,
            "title": item.title,
            "kind": item.kind,
            "status": item.status,
            "imageRef": item.image_ref,
        } if item else None,
    }


@bp.post("")
def create_claim():
    uid = require_user_id()
    data = ClaimCreateSchema().load(request.get_json(silent=True) or {})
    claim = coordinator.submit_claim(data["item_id"], uid, data["message"])
    return jsonify({"claim": _claim_to_dict(claim)}), 201


@bp.get("")
def list_claims():
    """Claims the caller submitted (role=mine, default) or received on their items (role=received).

    Optional itemId narrows to one item.
    """
    uid = require_user_id()
    role = (request.args.get("role") or "mine").lower()
    if role not in ("mine", "received"):
        raise ServiceError("Invalid role. Use mine or received.")
    item_id = request.args.get("itemId")
    try:
        item_filter = int(item_id) if item_id else None
    except ValueError:
        raise ServiceError("Invalid itemId")
    rows = coordinator.list_claims(uid, role, item_filter)
    return jsonify({"claims": [_claim_to_dict(c) for c in rows]})


@bp.get("/<int:claim_id>")
def get_claim(claim_id: int):
    uid = require_user_id()
    claim = coordinator.get_claim(claim_id)
    coordinator.require_participant(claim, uid)
    return jsonify({"claim": _claim_to_dict(claim)})


@bp.patch("/<int:claim_id>")
def update_claim_status(claim_id: int):
    """Body JSON: { status: 'approved' | 'rejected' }. Item owner only."""
    uid = require_user_id()
    data = ClaimStatusSchema().load(request.get_json(silent=True) or {})
    claim = coordinator.update_claim_status(claim_id, data["status"], uid)
    return jsonify({"claim": _claim_to_dict(claim)})
