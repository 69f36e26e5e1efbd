from flask import Blueprint, request, jsonify

from ...models.item import Item
from ...schemas.item import ItemCreateSchema, ItemUpdateSchema, ItemListArgsSchema
from ...security import current_user_id, require_user_id
from ...timeutil import isoformat
from ..claims.coordinator import can_reveal_contact, contact_for
from . import registry

bp = Blueprint("items", __name__, url_prefix="/items")


def _item_to_dict(it: Item, viewer_id: int | None = None) -> dict:
    payload = {
        "id": it.id,
        "ownerId": it.owner_id,
        "kind": it.kind,
        "category": it.category,
        "title": it.title,
        "description": it.description,
        "location": it.location,
        "eventDate": it.event_date.isoformat() if it.event_date else None,
        "imageRef": it.image_ref,
        "reward": it.reward,
        "status": it.status,
        "createdAt": isoformat(it.created_at),
        "updatedAt": isoformat(it.updated_at),
    }
    # Contact details only for the owner and users holding a claim on the item
    if can_reveal_contact(it, viewer_id):
        owner = it.owner
        payload["contact"] = {
            "fullName": getattr(owner, "full_name", None),
            "email": getattr(owner, "email", None),
            "phone": getattr(owner, "phone", None),
            "contactInfo": it.contact_info,
        }
    return payload


@bp.post("")
def create_item():
    uid = require_user_id()
    fields = ItemCreateSchema().load(request.get_json(silent=True) or {})
    item = registry.create_item(uid, fields)
    return jsonify({"item": _item_to_dict(item, uid)}), 201


@bp.get("")
def list_items():
    args = ItemListArgsSchema().load(request.args.to_dict())
    rows = registry.list_items(
        kind=args.get("kind"),
        category=args.get("category"),
        status=args.get("status"),
        owner_id=args.get("owner_id"),
        q=args.get("q"),
        limit=args.get("limit", 20),
    )
    viewer = current_user_id()
    return jsonify({"items": [_item_to_dict(it, viewer) for it in rows]})


@bp.get("/<int:item_id>")
def get_item(item_id: int):
    item = registry.get_item(item_id)
    return jsonify({"item": _item_to_dict(item, current_user_id())})


@bp.patch("/<int:item_id>")
def update_item(item_id: int):
    uid = require_user_id()
    fields = ItemUpdateSchema().load(request.get_json(silent=True) or {})
    item = registry.update_item(item_id, uid, fields)
    return jsonify({"item": _item_to_dict(item, uid)})


@bp.post("/<int:item_id>/returned")
def mark_returned(item_id: int):
    uid = require_user_id()
    item = registry.mark_returned(item_id, uid)
    return jsonify({"item": _item_to_dict(item, uid)})


@bp.delete("/<int:item_id>")
def delete_item(item_id: int):
    uid = require_user_id()
    registry.delete_item(item_id, uid)
    return jsonify({"ok": True})


@bp.get("/<int:item_id>/contact")
def item_contact(item_id: int):
    """Reporter contact details, visible once the caller has claimed the item."""
    uid = require_user_id()
    return jsonify({"contact": contact_for(item_id, uid)})
