"""Subscription API endpoints for restaurant members"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.subscription import SubscriptionPayment
from app.models.user import User, RestaurantRole
from app.schemas.subscription import (
    FeaturesResponse,
    QuotaStatus,
    SubscriptionOverview,
    SubscriptionPaymentCreate,
    SubscriptionPaymentResponse,
)
from app.api.auth import get_current_active_user, verify_restaurant_access
from app.services.subscriptions import create_manual_payment, days_remaining, get_subscription
from app.subscription.checker import get_all_features, get_quota_status
from app.subscription.plans import LIMIT_KEYS

router = APIRouter()

PAYMENT_HISTORY_LIMIT = 20


@router.get("", response_model=SubscriptionOverview)
async def get_subscription_overview(
    restaurant_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Current subscription, recent payments and days left"""
    await verify_restaurant_access(db, restaurant_id, current_user)

    subscription = await get_subscription(db, restaurant_id)
    result = await db.execute(
        select(SubscriptionPayment)
        .where(SubscriptionPayment.restaurant_id == restaurant_id)
        .order_by(SubscriptionPayment.created_at.desc())
        .limit(PAYMENT_HISTORY_LIMIT)
    )

    return SubscriptionOverview(
        subscription=subscription,
        payments=result.scalars().all(),
        days_remaining=days_remaining(subscription),
    )


@router.get("/features", response_model=FeaturesResponse)
async def get_features(
    restaurant_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Plan, feature flags and quota usage"""
    await verify_restaurant_access(db, restaurant_id, current_user)
    return await get_all_features(db, restaurant_id)


@router.get("/quotas/{quota}", response_model=QuotaStatus)
async def get_quota(
    restaurant_id: UUID,
    quota: str,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Usage of one quota"""
    await verify_restaurant_access(db, restaurant_id, current_user)

    if quota not in LIMIT_KEYS:
        raise HTTPException(status_code=404, detail="Quota inconnu")

    return await get_quota_status(db, restaurant_id, quota)


@router.post("/payments", response_model=SubscriptionPaymentResponse, status_code=201)
async def create_subscription_payment(
    restaurant_id: UUID,
    payment_data: SubscriptionPaymentCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Declare a manual payment for validation by the platform"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.ADMIN)
    return await create_manual_payment(db, restaurant_id, payment_data)
