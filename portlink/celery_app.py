"""
Celery application for background tasks.

Redis is both broker and result backend. Tasks:
- Feed cache warming (editor picks + trending tags)
- Notification retention cleanup
"""
from celery import Celery
from celery.schedules import crontab
from portlink.config.settings import settings

# Initialize Celery app
app = Celery(
    "portlink",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "portlink.tasks.maintenance_tasks",
    ]
)

# Celery configuration
app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Result backend settings
    result_expires=3600,  # Results expire after 1 hour

    # Broker settings
    broker_connection_retry_on_startup=True,
    broker_connection_retry=True,
    broker_connection_max_retries=10,

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,

    # Task routing
    task_routes={
        "portlink.tasks.maintenance_tasks.*": {"queue": "maintenance"},
    },
)

# Scheduled tasks (Beat schedule)
app.conf.beat_schedule = {
    # Re-warm editor picks and trending tags every 10 minutes
    "refresh-feed-cache": {
        "task": "portlink.tasks.maintenance_tasks.refresh_feed_cache",
        "schedule": crontab(minute="*/10"),  # Every 10 min
        "options": {"queue": "maintenance"},
    },

    # Drop old read notifications weekly (Sunday 3 AM UTC)
    "cleanup-old-notifications": {
        "task": "portlink.tasks.maintenance_tasks.cleanup_old_notifications",
        "schedule": crontab(hour=3, minute=0, day_of_week=0),  # Sunday 3 AM
        "options": {"queue": "maintenance"},
    },
}

if __name__ == "__main__":
    app.start()
