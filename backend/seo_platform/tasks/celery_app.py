"""
Celery application configuration for background tasks
"""

from celery import Celery
from celery.schedules import crontab
from seo_platform.core.config import settings

# Create Celery app instance
celery_app = Celery(
    'seo_platform',
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=['seo_platform.tasks.maintenance_tasks'],
)

# Load configuration
celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=15 * 60,
    task_soft_time_limit=10 * 60,
)

# Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    'aggregate-usage-daily': {
        'task': 'seo_platform.tasks.maintenance_tasks.aggregate_usage',
        'schedule': crontab(hour=0, minute=15),  # Yesterday's events are complete by then
    },
    'cleanup-rate-limits-daily': {
        'task': 'seo_platform.tasks.maintenance_tasks.cleanup_rate_limit_logs',
        'schedule': crontab(hour=3, minute=0),
    },
    'cleanup-admin-logs-weekly': {
        'task': 'seo_platform.tasks.maintenance_tasks.cleanup_admin_logs',
        'schedule': crontab(hour=4, minute=0, day_of_week='sunday'),
    },
}
