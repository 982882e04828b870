"""
Order status transition policy.

Orders placed by customers (QR table, public link) and from the dashboard
follow a strict sequential flow. Counter orders are taken at the point of
sale and may jump forward freely. No flow ever goes backwards and both
terminal statuses are final.
"""

import json
from datetime import datetime
from typing import Dict, List, Optional, Union
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.errors import InvalidTransitionError
from app.models.order import Order, OrderSource, OrderStatus
from app.services.stock import deduct_order_stock

logger = structlog.get_logger()

PENDING = OrderStatus.PENDING.value
PREPARING = OrderStatus.PREPARING.value
READY = OrderStatus.READY.value
DELIVERED = OrderStatus.DELIVERED.value
CANCELLED = OrderStatus.CANCELLED.value

STRICT_TRANSITIONS: Dict[str, List[str]] = {
    PENDING: [PREPARING, CANCELLED],
    PREPARING: [READY, CANCELLED],
    READY: [DELIVERED, CANCELLED],
    DELIVERED: [],
    CANCELLED: [],
}

FREE_TRANSITIONS: Dict[str, List[str]] = {
    PENDING: [PREPARING, READY, DELIVERED, CANCELLED],
    PREPARING: [READY, DELIVERED, CANCELLED],
    READY: [DELIVERED, CANCELLED],
    DELIVERED: [],
    CANCELLED: [],
}

ACTIVE_STATUSES = (PENDING, PREPARING, READY)
TERMINAL_STATUSES = (DELIVERED, CANCELLED)

StatusLike = Union[str, OrderStatus]


def _value(status: Union[str, OrderStatus, OrderSource, None]) -> Optional[str]:
    if isinstance(status, (OrderStatus, OrderSource)):
        return status.value
    return status


def transitions_for_source(source: Union[str, OrderSource, None]) -> Dict[str, List[str]]:
    """Counter orders get the free flow, every other source the strict one"""
    if _value(source) == OrderSource.COUNTER.value:
        return FREE_TRANSITIONS
    return STRICT_TRANSITIONS


def allowed_transitions(source: Union[str, OrderSource, None], current_status: StatusLike) -> List[str]:
    return list(transitions_for_source(source).get(_value(current_status), []))


def is_transition_allowed(
    source: Union[str, OrderSource, None],
    current_status: StatusLike,
    new_status: StatusLike,
) -> bool:
    return _value(new_status) in allowed_transitions(source, current_status)


def validate_transition(
    source: Union[str, OrderSource, None],
    current_status: StatusLike,
    new_status: StatusLike,
) -> None:
    if not is_transition_allowed(source, current_status, new_status):
        raise InvalidTransitionError(_value(current_status), _value(new_status))


async def notify_order_update(db: AsyncSession, order: Order) -> None:
    """Publish the change for realtime listeners on PostgreSQL"""
    if db.bind is None or db.bind.dialect.name != "postgresql":
        return
    payload = json.dumps({
        "order_id": str(order.id),
        "restaurant_id": str(order.restaurant_id),
        "status": order.status,
    })
    await db.execute(text("SELECT pg_notify('order_update', :payload)"), {"payload": payload})


async def apply_status_change(
    db: AsyncSession,
    order: Order,
    new_status: StatusLike,
    user_id: Optional[UUID] = None,
) -> Order:
    """
    Validate and apply a status change on an order loaded with its items.

    Stock is deducted the first time the order leaves ``pending`` for an
    active status. The caller commits.
    """
    new_status = _value(new_status)
    previous_status = order.status
    validate_transition(order.source, previous_status, new_status)

    if new_status != CANCELLED and not order.stock_deducted:
        await deduct_order_stock(db, order, user_id=user_id)

    order.status = new_status
    order.updated_at = datetime.utcnow()

    await notify_order_update(db, order)

    logger.info(
        "Order status updated",
        order_id=str(order.id),
        source=order.source,
        previous_status=previous_status,
        status=new_status,
    )
    return order
