"""
Celery application configuration.
"""
from celery import Celery
from celery.schedules import crontab
from config import settings

# Create Celery app
celery_app = Celery(
    "leaderboard",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["tasks.leaderboard_tasks"]  # Include task modules
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,
    worker_prefetch_multiplier=1,  # Only fetch one task at a time
)

# Optional: Configure result expiration
celery_app.conf.result_expires = 3600  # Results expire after 1 hour

# Celery Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    "refresh-active-ranking": {
        "task": "tasks.refresh_active_ranking",
        # Bounds how stale the published ranking can be
        "schedule": float(settings.LEADERBOARD_REFRESH_SECONDS),
    },
    "roll-over-period": {
        "task": "tasks.roll_over_period",
        "schedule": crontab(minute="*/5"),
    },
    "reconcile-point-totals-hourly": {
        "task": "tasks.reconcile_point_totals",
        "schedule": crontab(minute=15),
    },
    "resume-pending-rollovers": {
        "task": "tasks.resume_pending_rollovers",
        "schedule": crontab(minute="*/10"),
    },
}

if __name__ == "__main__":
    celery_app.start()
