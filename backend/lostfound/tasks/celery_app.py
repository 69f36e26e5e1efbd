import os
from celery import Celery
from celery.schedules import crontab


def make_celery() -> Celery:
    broker = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    backend = os.getenv("CELERY_RESULT_BACKEND", broker)
    app = Celery("lostfound", broker=broker, backend=backend, include=[
        "lostfound.tasks.jobs.maintenance",
    ])
    app.conf.update(
        task_track_started=True,
        timezone="UTC",
        beat_schedule={
            "purge-expired-otps": {
                "task": "lostfound.tasks.jobs.maintenance.purge_expired_otps",
                "schedule": crontab(minute="*/30"),
            },
            "send-appointment-reminders": {
                "task": "lostfound.tasks.jobs.maintenance.send_appointment_reminders",
                "schedule": crontab(minute=0),
            },
            "expire-stale-items": {
                "task": "lostfound.tasks.jobs.maintenance.expire_stale_items",
                "schedule": crontab(hour=3, minute=0),
            },
            "purge-old-activities": {
                "task": "lostfound.tasks.jobs.maintenance.purge_old_activities",
                "schedule": crontab(hour=3, minute=30),
            },
        },
    )
    return app

celery_app = make_celery()
