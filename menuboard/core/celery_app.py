"""
Menu Board — Celery application and beat schedule

Uses Redis as both broker and result backend.
Run a worker with the beat scheduler embedded:
    celery -A menuboard.core.celery_app worker -B
"""
from celery import Celery
from celery.schedules import crontab

from menuboard.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "menuboard",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["menuboard.tasks.scheduled_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,           # Only ack after task completes (fault-tolerant)
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,  # One task at a time per worker
    task_track_started=True,
)

beat_schedule = {
    "daily-menu-snapshot": {
        "task": "create_daily_snapshot",
        "schedule": crontab(hour=0, minute=0),
    },
    "refresh-exchange-rates": {
        "task": "refresh_exchange_rates",
        "schedule": crontab(hour=6, minute=0),
    },
}
if settings.GOOGLE_SHEETS_ID:
    beat_schedule["sync-google-sheets"] = {
        "task": "sync_google_sheets",
        "schedule": float(settings.SHEETS_SYNC_INTERVAL_SECONDS),
    }

celery_app.conf.beat_schedule = beat_schedule
