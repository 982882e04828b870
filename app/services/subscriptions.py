"""Trial, payment and activation lifecycle of subscriptions"""

import calendar
import math
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.errors import NotFoundError, ValidationError
from app.models.subscription import Subscription, SubscriptionPayment
from app.schemas.subscription import SubscriptionPaymentCreate
from app.services.audit import log_system_action
from app.subscription.plans import (
    SubscriptionPlan,
    calculate_price,
    get_plan_config,
    get_plan_limits,
    is_unlimited,
    is_valid_billing_cycle,
    is_valid_plan,
)

logger = structlog.get_logger()


def add_months(value: datetime, months: int) -> datetime:
    """Same day N months later, clamped to the end of shorter months"""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def days_remaining(subscription: Optional[Subscription], now: Optional[datetime] = None) -> int:
    """Whole days left in the current period, rounded up, never negative"""
    if subscription is None or subscription.period_end is None:
        return 0
    now = now or datetime.utcnow()
    seconds = (subscription.period_end - now).total_seconds()
    return max(0, math.ceil(seconds / 86400))


async def get_subscription(db: AsyncSession, restaurant_id: UUID) -> Optional[Subscription]:
    result = await db.execute(
        select(Subscription).where(Subscription.restaurant_id == restaurant_id)
    )
    return result.scalar_one_or_none()


def start_trial(db: AsyncSession, restaurant_id: UUID, now: Optional[datetime] = None) -> Subscription:
    """Starter trial for a newly created restaurant; the caller commits"""
    now = now or datetime.utcnow()
    trial_end = now + timedelta(days=settings.trial_days)
    subscription = Subscription(
        restaurant_id=restaurant_id,
        plan=SubscriptionPlan.STARTER.value,
        status="trial",
        billing_cycle=1,
        base_price=get_plan_config(SubscriptionPlan.STARTER)["monthly_price"],
        active_users_count=1,
        trial_starts_at=now,
        trial_ends_at=trial_end,
        current_period_start=now,
        current_period_end=trial_end,
    )
    db.add(subscription)
    return subscription


async def create_manual_payment(
    db: AsyncSession,
    restaurant_id: UUID,
    payment_data: SubscriptionPaymentCreate,
) -> SubscriptionPayment:
    """Register a payment awaiting validation by a platform administrator"""
    if not is_valid_plan(payment_data.plan):
        raise ValidationError("Plan invalide", detail=payment_data.plan)
    if not is_valid_billing_cycle(payment_data.billing_cycle):
        raise ValidationError("Durée d'abonnement invalide", detail=str(payment_data.billing_cycle))

    if payment_data.proof_url and not payment_data.proof_url.startswith(("http://", "https://")):
        raise ValidationError("URL de preuve invalide", detail=payment_data.proof_url)

    plan = SubscriptionPlan(payment_data.plan.lower())
    max_users = get_plan_limits(plan)["max_users"]
    if not is_unlimited(max_users) and payment_data.user_count > max_users:
        raise ValidationError(
            "Nombre d'utilisateurs invalide",
            detail=f"Maximum {max_users} utilisateurs pour ce plan",
        )

    subscription = await get_subscription(db, restaurant_id)
    if subscription is None:
        raise NotFoundError("Abonnement introuvable")

    now = datetime.utcnow()
    payment = SubscriptionPayment(
        subscription_id=subscription.id,
        restaurant_id=restaurant_id,
        plan=plan.value,
        billing_cycle=payment_data.billing_cycle,
        user_count=payment_data.user_count,
        amount=calculate_price(plan, payment_data.billing_cycle),
        method="manual",
        status="pending",
        proof_url=payment_data.proof_url,
        notes=payment_data.notes,
        expires_at=add_months(now, payment_data.billing_cycle),
    )
    db.add(payment)
    await db.commit()

    logger.info(
        "Subscription payment created",
        restaurant_id=str(restaurant_id),
        payment_id=str(payment.id),
        plan=plan.value,
        amount=payment.amount,
    )
    return payment


async def confirm_subscription_payment(
    db: AsyncSession,
    payment: SubscriptionPayment,
    validated_by: Optional[UUID] = None,
    now: Optional[datetime] = None,
) -> Subscription:
    """Confirm a pending payment and activate the subscription for the paid period"""
    if payment.status != "pending":
        raise ValidationError("Ce paiement a déjà été traité")

    subscription = await db.get(Subscription, payment.subscription_id)
    if subscription is None:
        raise NotFoundError("Abonnement introuvable")

    now = now or datetime.utcnow()
    payment.status = "confirmed"
    payment.validated_at = now
    payment.validated_by = validated_by

    subscription.plan = payment.plan
    subscription.status = "active"
    subscription.billing_cycle = payment.billing_cycle
    subscription.base_price = get_plan_config(payment.plan)["monthly_price"]
    subscription.active_users_count = payment.user_count or 1
    subscription.current_period_start = now
    subscription.current_period_end = add_months(now, payment.billing_cycle)

    log_system_action(
        db,
        "subscription_activated",
        restaurant_id=payment.restaurant_id,
        actor_id=validated_by,
        resource_type="subscription_payment",
        resource_id=payment.id,
        data={"plan": payment.plan, "billing_cycle": payment.billing_cycle, "amount": payment.amount},
    )

    logger.info(
        "Subscription activated",
        restaurant_id=str(payment.restaurant_id),
        plan=payment.plan,
        period_end=subscription.current_period_end.isoformat(),
    )
    return subscription


def fail_subscription_payment(
    db: AsyncSession,
    payment: SubscriptionPayment,
    reason: Optional[str] = None,
    actor_id: Optional[UUID] = None,
) -> SubscriptionPayment:
    if payment.status != "pending":
        raise ValidationError("Ce paiement a déjà été traité")
    payment.status = "failed"
    payment.error_message = reason
    log_system_action(
        db,
        "subscription_payment_failed",
        level="warning",
        restaurant_id=payment.restaurant_id,
        actor_id=actor_id,
        resource_type="subscription_payment",
        resource_id=payment.id,
        data={"reason": reason},
    )
    return payment
