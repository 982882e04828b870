"""Persisted system log entries"""

from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models.audit import SystemLog

logger = structlog.get_logger()


def log_system_action(
    db: AsyncSession,
    action: str,
    level: str = "info",
    restaurant_id: Optional[UUID] = None,
    actor_id: Optional[UUID] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[UUID] = None,
    data: Optional[Dict[str, Any]] = None,
) -> SystemLog:
    """Add a system log row to the current transaction"""
    entry = SystemLog(
        restaurant_id=restaurant_id,
        actor_id=actor_id,
        actor_type="user" if actor_id else "system",
        action=action,
        level=level,
        resource_type=resource_type,
        resource_id=resource_id,
        data_json=data or {},
    )
    db.add(entry)
    logger.debug("System log recorded", action=action, level=level)
    return entry
