# app/celery_worker.py
from celery import Celery
from celery.schedules import crontab

from app.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
    SUMMARY_TIMEZONE,
)

celery_app = Celery(
    "marketplace",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAŻNE: Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = (
    "app.services.notification_service",
    "app.tasks.weekly_summary",
)

# Konfiguracja beat schedule
celery_app.conf.beat_schedule = {
    "weekly-sales-summary": {
        "task": "app.tasks.weekly_summary.weekly_sales_summary_task",
        "schedule": crontab(hour=9, minute=0, day_of_week="mon"),  # poniedzialek 9:00
    },
}

celery_app.conf.timezone = SUMMARY_TIMEZONE
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
