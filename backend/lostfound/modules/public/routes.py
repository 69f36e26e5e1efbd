from __future__ import annotations

import logging
from html import escape

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func

from ...errors import DependencyFailure
from ...extensions import db
from ...integrations.email.client import send_email
from ...models.item import Item
from ...schemas.auth import ContactSchema

logger = logging.getLogger(__name__)

bp = Blueprint("public", __name__, url_prefix="/public")


@bp.get("/stats")
def public_stats():
    """Landing-page counters: { returned, pending } item totals."""
    rows = dict(
        db.session.query(Item.status, func.count(Item.id))
        .filter(Item.status.in_(("returned", "pending")))
        .group_by(Item.status)
        .all()
    )
    return jsonify({"returned": int(rows.get("returned", 0)), "pending": int(rows.get("pending", 0))})


@bp.post("/contact")
def contact():
    """Forward a contact-form message to the support inbox and confirm receipt to the sender.

    The support email must go out; the confirmation is best-effort.
    """
    data = ContactSchema().load(request.get_json(silent=True) or {})
    name, email, message = escape(data["name"]), data["email"], escape(data["message"])
    support = current_app.config.get("SUPPORT_EMAIL")
    if not support:
        raise DependencyFailure("Contact form is not configured")

    forwarded = send_email(
        support,
        f"Contact Form from {data['name']}",
        f"<p><strong>Name:</strong> {name}</p>"
        f"<p><strong>Email:</strong> <a href=\"mailto:{escape(email)}\">{escape(email)}</a></p>"
        f"<h2>Message</h2><p style=\"white-space: pre-wrap;\">{message}</p>",
    )
    if not forwarded:
        raise DependencyFailure("Could not deliver your message. Please try again later.")

    confirmed = send_email(
        email,
        "We received your message!",
        f"<h1>Thank you, {name}!</h1>"
        "<p>We have received your message and will get back to you soon.</p>"
        f"<p><strong>Your message:</strong></p><p style=\"white-space: pre-wrap;\">{message}</p>",
    )
    if not confirmed:
        logger.warning("Contact confirmation email to %s failed", email)
    return jsonify({"success": True, "confirmationSent": confirmed})
