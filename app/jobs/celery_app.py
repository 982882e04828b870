"""Celery application configuration"""

from celery import Celery
from celery.schedules import crontab
from app.config import settings

# Create Celery app
celery_app = Celery(
    "akom",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "app.jobs.tasks",
    ],
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Beat schedule for the lifecycle jobs
    beat_schedule={
        "check-subscriptions": {
            "task": "check_subscriptions",
            "schedule": crontab(minute=0, hour=0),
        },
        "suspend-expired-restaurants": {
            "task": "suspend_expired_restaurants",
            "schedule": crontab(minute=30, hour=0),
        },
        "cancel-abandoned-orders": {
            "task": "cancel_abandoned_orders",
            "schedule": 900.0,  # Every 15 minutes
        },
        "send-subscription-reminders": {
            "task": "send_subscription_reminders",
            "schedule": crontab(minute=0, hour=8),
        },
        "send-stock-alerts": {
            "task": "send_stock_alerts",
            "schedule": crontab(minute=0, hour=7),
        },
        "alert-pending-orders": {
            "task": "alert_pending_orders",
            "schedule": 900.0,
        },
        "verify-stock-consistency": {
            "task": "verify_stock_consistency",
            "schedule": crontab(minute=0, hour=2),
        },
        "archive-old-orders": {
            "task": "archive_old_orders",
            "schedule": crontab(minute=30, hour=2),
        },
        "clean-system-logs": {
            "task": "clean_system_logs",
            "schedule": crontab(minute=0, hour=3),
        },
        "send-daily-reports": {
            "task": "send_daily_reports",
            "schedule": crontab(minute=0, hour=6),
        },
        "clean-pending-payments": {
            "task": "clean_pending_payments",
            "schedule": crontab(minute=0),  # Hourly
        },
    },
)
