from __future__ import annotations

import logging
import os

import requests
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"


def _setting(key: str, default: str | None = None) -> str | None:
    # Resolve settings: app config > env
    if has_app_context():
        value = current_app.config.get(key)
        if value:
            return value
    return os.getenv(key) or default


def send_email(to_address: str, subject: str, body_html: str, *, api_key: str | None = None, sender: str | None = None) -> bool:
    """Send one transactional email through Resend.

    Returns True on acceptance and False on any failure; never retries. Callers
    decide whether a failed send fails their operation.
    """
    api_key = api_key or _setting("RESEND_API_KEY")
    sender = sender or _setting("EMAIL_FROM", "Lost & Found Hub <onboarding@resend.dev>")
    if not api_key:
        logger.error("Email not sent to %s: RESEND_API_KEY is not configured", to_address)
        return False
    try:
        resp = requests.post(
            RESEND_URL,
            json={"from": sender, "to": [to_address], "subject": subject, "html": body_html},
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=15,
        )
    except requests.RequestException:
        logger.exception("Email request to Resend failed for %s", to_address)
        return False
    if not resp.ok:
        try:
            details = resp.json()
        except ValueError:
            details = resp.text[:500]
        logger.error("Resend API error (HTTP %s) for %s: %s", resp.status_code, to_address, details)
        return False
    return True
