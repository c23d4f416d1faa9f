# marketplace/celery_worker.py
from celery import Celery
from celery.schedules import crontab

from marketplace.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TIMEZONE,
    REMINDER_HOUR,
)

celery_app = Celery(
    "marketplace",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAZNE: explicite importuj taski, zeby Celery je zarejestrowal
celery_app.conf.imports = (
    "marketplace.tasks.expire",
    "marketplace.tasks.reminders",
    "marketplace.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "expire-checkouts-every-minute": {
        "task": "marketplace.tasks.expire.expire_checkouts_task",
        "schedule": 60.0,
    },
    "rental-return-reminders-daily": {
        "task": "marketplace.tasks.reminders.rental_reminders_task",
        "schedule": crontab(hour=REMINDER_HOUR, minute=0),
    },
}

celery_app.conf.timezone = CELERY_TIMEZONE
