"""Background job tasks"""

import asyncio
import structlog

from app.jobs.celery_app import celery_app

logger = structlog.get_logger()


def run_async(coro):
    """Helper to run async functions in sync context"""
    return asyncio.run(coro)


async def run_lifecycle_job(name: str):
    """Run one lifecycle job in its own session"""
    import app.models  # noqa: F401 - register every mapper
    from app.database import SessionLocal, engine
    from app.services.audit import log_system_action
    from app.services.lifecycle import JOBS

    try:
        async with SessionLocal() as db:
            try:
                return await JOBS[name](db)
            except Exception as e:
                await db.rollback()
                logger.exception("Lifecycle job failed", job=name)
                log_system_action(db, "cron_error", level="error", data={"job": name, "error": str(e)})
                await db.commit()
                raise
    finally:
        # Pooled connections are bound to this task's event loop
        await engine.dispose()


@celery_app.task(name="check_subscriptions")
def check_subscriptions():
    """Expire ended trials and paid periods"""
    logger.info("Checking subscriptions")
    return run_async(run_lifecycle_job("check-subscriptions"))


@celery_app.task(name="suspend_expired_restaurants")
def suspend_expired_restaurants():
    """Deactivate restaurants whose subscription expired"""
    logger.info("Suspending expired restaurants")
    return run_async(run_lifecycle_job("suspend-expired-restaurants"))


@celery_app.task(name="cancel_abandoned_orders")
def cancel_abandoned_orders():
    """Cancel orders left pending too long"""
    logger.info("Cancelling abandoned orders")
    return run_async(run_lifecycle_job("cancel-abandoned-orders"))


@celery_app.task(name="send_subscription_reminders")
def send_subscription_reminders():
    logger.info("Sending subscription reminders")
    return run_async(run_lifecycle_job("send-subscription-reminders"))


@celery_app.task(name="send_stock_alerts")
def send_stock_alerts():
    logger.info("Sending stock alerts")
    return run_async(run_lifecycle_job("send-stock-alerts"))


@celery_app.task(name="alert_pending_orders")
def alert_pending_orders():
    """Warn admins about orders nobody picked up"""
    logger.info("Alerting on pending orders")
    return run_async(run_lifecycle_job("alert-pending-orders"))


@celery_app.task(name="verify_stock_consistency")
def verify_stock_consistency():
    logger.info("Verifying stock consistency")
    return run_async(run_lifecycle_job("verify-stock-consistency"))


@celery_app.task(name="send_daily_reports")
def send_daily_reports():
    logger.info("Sending daily reports")
    return run_async(run_lifecycle_job("send-daily-reports"))


@celery_app.task(name="archive_old_orders")
def archive_old_orders():
    logger.info("Archiving old orders")
    return run_async(run_lifecycle_job("archive-old-orders"))


@celery_app.task(name="clean_pending_payments")
def clean_pending_payments():
    """Expire manual payments never validated"""
    logger.info("Cleaning pending payments")
    return run_async(run_lifecycle_job("clean-pending-payments"))


@celery_app.task(name="clean_system_logs")
def clean_system_logs():
    logger.info("Cleaning system logs")
    return run_async(run_lifecycle_job("clean-system-logs"))
