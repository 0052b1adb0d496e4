import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("staybook")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Expire unpaid bookings past their payment deadline - every 5 minutes
    "expire-overdue-bookings": {
        "task": "bookings.expire_overdue_bookings",
        "schedule": 300.0,
        "options": {"expires": 240},
    },
}
