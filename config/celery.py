import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("glamping_booking")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Повтор шагов, упавших после коммита брони - каждые 5 минут
    "retry-reconciliation-entries": {
        "task": "bookings.retry_reconciliation_entries",
        "schedule": 300.0,
        "options": {"expires": 280},
    },
    # Завершение броней после выезда - каждый час
    "complete-finished-bookings": {
        "task": "bookings.complete_finished_bookings",
        "schedule": crontab(minute=15),  # каждый час в 15 минут
    },
}

app.conf.timezone = "UTC"
