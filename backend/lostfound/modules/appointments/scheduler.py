"""Two-party meetup proposals scoped to a claim.

pending -> confirmed    by the participant who did not propose it
pending|confirmed -> cancelled    by either participant
confirmed -> completed  by the item owner, once the meetup time has passed
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ...errors import Forbidden, InvalidOperation, NotFound
from ...extensions import db
from ...models.appointment import Appointment
from ...models.claim import Claim
from ...timeutil import as_utc, isoformat, utcnow
from ..claims.coordinator import get_claim, other_participant, require_participant
from ..notifications.dispatcher import notify, publish_notifications
from ..users.activity import record_activity

logger = logging.getLogger(__name__)


def appointment_to_dict(a: Appointment) -> dict:
    return {
        "id": a.id,
        "claimId": a.claim_id,
        "scheduledTime": isoformat(a.scheduled_time),
        "location": a.location,
        "notes": a.notes,
        "createdBy": a.created_by,
        "status": a.status,
        "createdAt": isoformat(a.created_at),
        "updatedAt": isoformat(a.updated_at),
    }


def _get(appointment_id: int) -> Appointment:
    a = db.session.get(Appointment, appointment_id)
    if a is None:
        raise NotFound("Appointment not found")
    return a


def _when(a: Appointment) -> str:
    ts = as_utc(a.scheduled_time)
    return ts.strftime("%Y-%m-%d %H:%M UTC") if ts else "the agreed time"


def _notify(recipient_id: int, claim: Claim, a: Appointment, action: str, title: str, body: str):
    return notify(
        recipient_id,
        "appointment",
        title,
        body,
        item_id=claim.item_id,
        payload={"action": action, "claimId": int(claim.id), "appointmentId": int(a.id)},
    )


def propose_appointment(
    claim_id: int,
    actor_id: int,
    scheduled_time: datetime,
    location: str,
    notes: str | None = None,
    *,
    now: datetime | None = None,
) -> Appointment:
    claim = get_claim(claim_id)
    require_participant(claim, actor_id)
    if claim.item.status == "expired":
        raise InvalidOperation("Appointments cannot be scheduled for an expired item")
    if claim.status == "rejected":
        raise InvalidOperation("Appointments cannot be scheduled for a rejected claim")
    when = as_utc(scheduled_time)
    if when is None or when <= (now or utcnow()):
        raise InvalidOperation("Appointment time must be in the future")
    location = (location or "").strip()
    if not location:
        raise InvalidOperation("Location is required")

    a = Appointment(
        claim_id=claim.id,
        scheduled_time=when,
        location=location,
        notes=(notes or "").strip() or None,
        created_by=int(actor_id),
        status="pending",
    )
    db.session.add(a)
    db.session.flush()
    n = _notify(
        other_participant(claim, actor_id), claim, a, "proposed",
        "New meetup proposed",
        f"A meetup for '{claim.item.title}' was proposed at {location} on {_when(a)}.",
    )
    record_activity(actor_id, "appointment_proposed", f"Proposed a meetup for '{claim.item.title}'",
                    {"claimId": int(claim.id), "appointmentId": int(a.id)})
    db.session.commit()
    publish_notifications([n])
    return a


def confirm_appointment(appointment_id: int, actor_id: int) -> Appointment:
    a = _get(appointment_id)
    claim = a.claim
    require_participant(claim, actor_id)
    if int(a.created_by) == int(actor_id):
        raise Forbidden("The other participant must confirm this appointment")
    if claim.item.status == "expired":
        raise InvalidOperation("Appointments cannot be confirmed for an expired item")
    if a.status != "pending":
        raise InvalidOperation(f"A {a.status} appointment cannot be confirmed")

    a.status = "confirmed"
    n = _notify(
        a.created_by, claim, a, "confirmed",
        "Meetup confirmed",
        f"Your meetup for '{claim.item.title}' on {_when(a)} was confirmed.",
    )
    record_activity(actor_id, "appointment_confirmed", f"Confirmed a meetup for '{claim.item.title}'",
                    {"claimId": int(claim.id), "appointmentId": int(a.id)})
    db.session.commit()
    publish_notifications([n])
    return a


def cancel_appointment(appointment_id: int, actor_id: int) -> Appointment:
    a = _get(appointment_id)
    claim = a.claim
    require_participant(claim, actor_id)
    if a.status not in ("pending", "confirmed"):
        raise InvalidOperation(f"A {a.status} appointment cannot be cancelled")

    a.status = "cancelled"
    n = _notify(
        other_participant(claim, actor_id), claim, a, "cancelled",
        "Meetup cancelled",
        f"The meetup for '{claim.item.title}' on {_when(a)} was cancelled.",
    )
    record_activity(actor_id, "appointment_cancelled", f"Cancelled a meetup for '{claim.item.title}'",
                    {"claimId": int(claim.id), "appointmentId": int(a.id)})
    db.session.commit()
    publish_notifications([n])
    return a


def complete_appointment(appointment_id: int, actor_id: int, *, now: datetime | None = None) -> Appointment:
    a = _get(appointment_id)
    claim = a.claim
    require_participant(claim, actor_id)
    if int(claim.item.owner_id) != int(actor_id):
        raise Forbidden("Only the item owner can mark a meetup as completed")
    if a.status != "confirmed":
        raise InvalidOperation(f"A {a.status} appointment cannot be completed")
    if as_utc(a.scheduled_time) > (now or utcnow()):
        raise InvalidOperation("The meetup has not happened yet")
    a.status = "completed"
    db.session.commit()
    return a


def list_appointments(claim_id: int, user_id: int) -> list[Appointment]:
    claim = get_claim(claim_id)
    require_participant(claim, user_id)
    return (
        Appointment.query.filter(Appointment.claim_id == claim.id)
        .order_by(Appointment.scheduled_time.asc(), Appointment.id.asc())
        .all()
    )


def send_appointment_reminders(window_hours: int = 24, now: datetime | None = None) -> int:
    """Notify both participants of confirmed meetups starting within the window, once each."""
    now = now or utcnow()
    due = (
        Appointment.query
        .filter(
            Appointment.status == "confirmed",
            Appointment.reminder_sent_at.is_(None),
            Appointment.scheduled_time > now,
            Appointment.scheduled_time <= now + timedelta(hours=window_hours),
        )
        .all()
    )
    rows = []
    for a in due:
        claim = a.claim
        for uid in claim.participant_ids:
            rows.append(_notify(
                uid, claim, a, "reminder",
                "Upcoming meetup",
                f"Reminder: meetup for '{claim.item.title}' at {a.location} on {_when(a)}.",
            ))
        a.reminder_sent_at = now
    db.session.commit()
    publish_notifications(rows)
    if due:
        logger.info("Sent reminders for %d appointment(s)", len(due))
    return len(due)
