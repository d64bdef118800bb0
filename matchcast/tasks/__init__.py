"""Celery tasks for MatchCast.

This module configures Celery and registers all periodic tasks.
"""

from celery import Celery
from celery.schedules import crontab

from matchcast.config import get_settings

settings = get_settings()

# Create Celery application
celery_app = Celery(
    "matchcast",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "matchcast.tasks.health",
    ],
)

# Celery configuration
celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    # Timezone
    timezone="UTC",
    enable_utc=True,
    # Task behavior
    task_track_started=True,
    task_time_limit=60,
    task_soft_time_limit=50,
    # Result expiration
    result_expires=3600,  # 1 hour
)

# Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    # Rolling 24h sync counters - every day at midnight UTC
    "reset-daily-counters": {
        "task": "matchcast.tasks.health.reset_daily_counters",
        "schedule": crontab(minute=0, hour=0),
        "options": {"expires": 3540},
    },
}
