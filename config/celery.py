import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("localgrid")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Due booking reminders - every minute
    "process-reminder-queue": {
        "task": "bookings.process_reminder_queue",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
    # Complete past bookings and send review requests - daily at 02:00
    "run-daily-cleanup": {
        "task": "bookings.run_daily_cleanup",
        "schedule": crontab(minute=0, hour=2),
    },
}

app.conf.timezone = "UTC"
