"""Bearer-guarded endpoints triggering the lifecycle jobs"""

import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.database import get_db
from app.services.audit import log_system_action
from app.services.lifecycle import JOBS

router = APIRouter()
logger = structlog.get_logger()


def is_authorized(authorization: Optional[str]) -> bool:
    if not settings.cron_secret or not authorization:
        return False
    return secrets.compare_digest(
        authorization.encode(), f"Bearer {settings.cron_secret}".encode()
    )


async def run_job(name: str, db: AsyncSession, authorization: Optional[str]):
    if not is_authorized(authorization):
        logger.warning("Unauthorized cron call", job=name)
        return JSONResponse(status_code=401, content={"error": "Non autorisé"})

    job = JOBS[name]
    try:
        report = await job(db)
    except Exception as e:
        await db.rollback()
        logger.exception("Cron job failed", job=name)
        log_system_action(db, "cron_error", level="error", data={"job": name, "error": str(e)})
        await db.commit()
        raise

    return {"success": True, "job": name, **report}


@router.get("/check-subscriptions")
async def check_subscriptions(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    """Expire ended trials and paid periods"""
    return await run_job("check-subscriptions", db, authorization)


@router.get("/suspend-expired-restaurants")
async def suspend_expired_restaurants(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    """Deactivate restaurants whose subscription expired"""
    return await run_job("suspend-expired-restaurants", db, authorization)


@router.get("/cancel-abandoned-orders")
async def cancel_abandoned_orders(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    """Cancel orders left pending too long"""
    return await run_job("cancel-abandoned-orders", db, authorization)


@router.get("/send-subscription-reminders")
async def send_subscription_reminders(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    return await run_job("send-subscription-reminders", db, authorization)


@router.get("/send-stock-alerts")
async def send_stock_alerts(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    return await run_job("send-stock-alerts", db, authorization)


@router.get("/alert-pending-orders")
async def alert_pending_orders(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    """Warn admins about orders nobody picked up"""
    return await run_job("alert-pending-orders", db, authorization)


@router.get("/verify-stock-consistency")
async def verify_stock_consistency(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    return await run_job("verify-stock-consistency", db, authorization)


@router.get("/send-daily-reports")
async def send_daily_reports(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    """Email yesterday's figures to each restaurant"""
    return await run_job("send-daily-reports", db, authorization)


@router.get("/archive-old-orders")
async def archive_old_orders(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    return await run_job("archive-old-orders", db, authorization)


@router.get("/clean-pending-payments")
async def clean_pending_payments(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    return await run_job("clean-pending-payments", db, authorization)


@router.get("/clean-system-logs")
async def clean_system_logs(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    """Purge expired system logs"""
    return await run_job("clean-system-logs", db, authorization)
