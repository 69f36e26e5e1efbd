from flask import Blueprint, jsonify, request

from ...schemas.appointment import AppointmentCreateSchema
from ...security import require_user_id
from . import scheduler

bp = Blueprint("appointments", __name__)


@bp.get("/claims/<int:claim_id>/appointments")
def list_appointments(claim_id: int):
    uid = require_user_id()
    rows = scheduler.list_appointments(claim_id, uid)
    return jsonify({"appointments": [scheduler.appointment_to_dict(a) for a in rows]})


@bp.post("/claims/<int:claim_id>/appointments")
def propose_appointment(claim_id: int):
    """Body JSON: { scheduledTime: ISO-8601, location: str, notes?: str }"""
    uid = require_user_id()
    data = AppointmentCreateSchema().load(request.get_json(silent=True) or {})
    a = scheduler.propose_appointment(claim_id, uid, data["scheduled_time"], data["location"], data.get("notes"))
    return jsonify({"appointment": scheduler.appointment_to_dict(a)}), 201


@bp.post("/appointments/<int:appointment_id>/confirm")
def confirm_appointment(appointment_id: int):
    uid = require_user_id()
    a = scheduler.confirm_appointment(appointment_id, uid)
    return jsonify({"appointment": scheduler.appointment_to_dict(a)})


@bp.post("/appointments/<int:appointment_id>/cancel")
def cancel_appointment(appointment_id: int):
    uid = require_user_id()
    a = scheduler.cancel_appointment(appointment_id, uid)
    return jsonify({"appointment": scheduler.appointment_to_dict(a)})


@bp.post("/appointments/<int:appointment_id>/complete")
def complete_appointment(appointment_id: int):
    uid = require_user_id()
    a = scheduler.complete_appointment(appointment_id, uid)
    return jsonify({"appointment": scheduler.appointment_to_dict(a)})
