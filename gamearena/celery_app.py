"""
Celery application configuration
"""

import os
from celery import Celery
from celery.schedules import crontab
from gamearena.core.config import settings

# Use REDIS_URL as fallback for Celery broker
broker_url = os.environ.get('CELERY_BROKER_URL', os.environ.get('REDIS_URL', settings.celery_broker_url))
backend_url = os.environ.get('CELERY_RESULT_BACKEND', os.environ.get('REDIS_URL', settings.celery_result_backend))

# Create Celery instance
celery = Celery(
    "gamearena",
    broker=broker_url,
    backend=backend_url,
    include=["gamearena.tasks.tasks"]
)

# Configure Celery
celery.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=5 * 60,
    task_soft_time_limit=4 * 60,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    result_expires=3600,  # 1 hour
    worker_concurrency=int(os.getenv("CELERY_WORKER_CONCURRENCY", 4)),
    task_routes={
        "gamearena.tasks.tasks.deliver_notification": {"queue": "notifications"},
        "gamearena.tasks.tasks.reconcile_pending_entries": {"queue": "default"},
    },
    task_default_queue="default",
)

# Periodic tasks for Celery Beat
celery.conf.beat_schedule = {
    'reconcile-pending-entries': {
        'task': 'gamearena.tasks.tasks.reconcile_pending_entries',
        'schedule': crontab(minute='*/5'),
    },
}

# For testing, we can run tasks synchronously
if settings.app_env == "testing":
    celery.conf.task_always_eager = True
    celery.conf.task_eager_propagates = True

if __name__ == "__main__":
    celery.start()
