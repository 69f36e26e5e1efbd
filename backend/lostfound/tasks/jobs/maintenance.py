"""Periodic housekeeping run by Celery beat. None of the request paths depend on these running."""
from __future__ import annotations

import logging

from flask import Flask

from lostfound.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)

_flask_app: Flask | None = None


def _app() -> Flask:
    global _flask_app
    if _flask_app is None:
        from lostfound import create_app
        _flask_app = create_app()
    return _flask_app


@celery_app.task
def purge_expired_otps() -> int:
    from lostfound.modules.auth.otp import purge_expired_otps as purge
    with _app().app_context():
        count = purge()
    logger.info("Purged %d used or expired login code(s)", count)
    return count


@celery_app.task
def send_appointment_reminders() -> int:
    from lostfound.modules.appointments.scheduler import send_appointment_reminders as remind
    app = _app()
    with app.app_context():
        return remind(int(app.config.get("APPOINTMENT_REMINDER_WINDOW_HOURS", 24)))


@celery_app.task
def expire_stale_items() -> int:
    from lostfound.modules.items.registry import expire_stale_items as expire
    app = _app()
    with app.app_context():
        return expire(int(app.config.get("ITEM_EXPIRY_DAYS", 90)))


@celery_app.task
def purge_old_activities() -> int:
    from lostfound.modules.users.activity import purge_old_activities as purge
    app = _app()
    with app.app_context():
        count = purge(int(app.config.get("ACTIVITY_RETENTION_DAYS", 30)))
    logger.info("Purged %d old activity entr(ies)", count)
    return count
