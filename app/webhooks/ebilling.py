"""eBilling payment notification webhook"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.order import Payment, PaymentStatus
from app.models.subscription import SubscriptionPayment
from app.services.order_status import CANCELLED, PREPARING, apply_status_change, is_transition_allowed
from app.services.orders import get_order_with_items
from app.services.subscriptions import confirm_subscription_payment, fail_subscription_payment

router = APIRouter()
logger = structlog.get_logger()

SUCCESSFUL = "SUCCESSFUL"
FAILED = "FAILED"
DEFAULT_FAILURE_MESSAGE = "Paiement échoué"


def parse_reference(reference: str) -> Optional[UUID]:
    try:
        return UUID(str(reference))
    except ValueError:
        return None


async def handle_subscription_payment(
    db: AsyncSession,
    payment: SubscriptionPayment,
    payment_status: Optional[str],
    error_message: str,
) -> None:
    if payment.status != "pending":
        logger.info("Subscription payment already processed", payment_id=str(payment.id), status=payment.status)
        return

    if payment_status == SUCCESSFUL:
        await confirm_subscription_payment(db, payment)
    elif payment_status == FAILED:
        fail_subscription_payment(db, payment, reason=error_message)


async def handle_order_payment(
    db: AsyncSession,
    payment: Payment,
    payment_status: Optional[str],
    error_message: str,
) -> None:
    if payment_status not in (SUCCESSFUL, FAILED):
        return

    order = await get_order_with_items(db, payment.order_id)

    if payment_status == SUCCESSFUL:
        payment.status = PaymentStatus.PAID.value
        payment.paid_at = datetime.utcnow()
        target_status = PREPARING
    else:
        payment.status = PaymentStatus.FAILED.value
        payment.error_message = error_message
        target_status = CANCELLED

    # Order status only follows when its own flow allows it
    if order is not None and is_transition_allowed(order.source, order.status, target_status):
        await apply_status_change(db, order, target_status)
        if target_status == CANCELLED:
            order.notes = "Annulée - paiement échoué"


@router.post("")
async def handle_ebilling_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Payment notification from eBilling.

    The reference is either a subscription payment id or an order payment id.
    """
    payload: Dict[str, Any] = await request.json()
    reference = payload.get("reference")
    payment_status = payload.get("status") or payload.get("payment_status")
    error_message = payload.get("error_message") or DEFAULT_FAILURE_MESSAGE

    logger.info("eBilling notification received", reference=reference, status=payment_status)

    if not reference:
        raise HTTPException(status_code=400, detail="Référence manquante")

    payment_id = parse_reference(reference)

    subscription_payment = await db.get(SubscriptionPayment, payment_id) if payment_id else None
    if subscription_payment is not None:
        await handle_subscription_payment(db, subscription_payment, payment_status, error_message)
        await db.commit()
        return {"success": True}

    order_payment = await db.get(Payment, payment_id) if payment_id else None
    if order_payment is not None:
        await handle_order_payment(db, order_payment, payment_status, error_message)
        await db.commit()
        return {"success": True}

    logger.warning("eBilling notification for unknown payment", reference=reference)
    raise HTTPException(status_code=404, detail="Paiement introuvable")
