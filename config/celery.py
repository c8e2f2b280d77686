import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("venue_reservations")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Close confirmed reservations whose window has passed - every 15 minutes
    "complete-finished-reservations": {
        "task": "reservations.complete_finished_reservations",
        "schedule": crontab(minute="*/15"),
        "options": {"expires": 600},
    },
}
