"""Celery app bootstrap (AWS SQS broker) with the daily dispatch sweep."""

from __future__ import annotations

from celery import Celery
from celery.schedules import crontab

from plantcare.core.config import get_settings, parse_local_time


settings = get_settings()

QUEUE_PREFIX = (settings.CELERY_QUEUE_PREFIX or "plantcare-").strip()
# Celery SQS transport applies `queue_name_prefix` to queue names.
DEFAULT_QUEUE = "default"

celery_app = Celery(
    "plantcare",
    broker=(settings.CELERY_BROKER_URL or "sqs://").strip(),
    include=["plantcare.worker.tasks"],
)

celery_app.conf.update(
    broker_transport_options={
        "region": (settings.AWS_REGION or "").strip(),
        "queue_name_prefix": QUEUE_PREFIX,
        "visibility_timeout": int(settings.CELERY_VISIBILITY_TIMEOUT),
    },
    task_default_queue=DEFAULT_QUEUE,
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    # Beat fires in the same reference timezone the engine uses for calendar days
    timezone=settings.REFERENCE_TIMEZONE,
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_reject_on_worker_lost=True,
)

if settings.CELERY_TASK_TIME_LIMIT:
    celery_app.conf.task_time_limit = int(settings.CELERY_TASK_TIME_LIMIT)


# =============================================================================
# Celery Beat Schedule - Periodic Tasks
# =============================================================================

SWEEP_TIME = parse_local_time(settings.DEFAULT_ALERT_LOCAL_TIME)

celery_app.conf.beat_schedule = {
    # One dispatch sweep per day at the default alert time
    "run-daily-dispatch-sweep": {
        "task": "plantcare.worker.tasks.run_dispatch_sweep",
        "schedule": crontab(hour=SWEEP_TIME.hour, minute=SWEEP_TIME.minute),
        "options": {"queue": DEFAULT_QUEUE},
    },
}
