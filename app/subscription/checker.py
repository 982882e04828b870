"""
Feature and quota gating.

Nothing is cached: the plan and the usage counters are read for every check.
"""

from datetime import datetime
from typing import Dict, Optional, Union
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.errors import FeatureNotAvailableError, QuotaExceededError
from app.models.menu import Category, Product
from app.models.order import Order
from app.models.subscription import Subscription
from app.models.tenant import Table
from app.models.user import RestaurantUser
from app.schemas.subscription import QuotaCheck, QuotaStatus, FeaturesResponse
from app.subscription.plans import (
    SubscriptionPlan,
    DEFAULT_PLAN,
    Limit,
    get_plan_features,
    get_plan_limits,
    is_unlimited,
    plan_feature_value,
    to_subscription_plan,
)

logger = structlog.get_logger()

NEAR_LIMIT_THRESHOLD = 80
AT_LIMIT_THRESHOLD = 100

# Quota keys exposed in the features summary
QUOTA_SUMMARY = {
    "tables": "max_tables",
    "products": "max_products",
    "categories": "max_categories",
    "orders": "max_orders_per_day",
    "users": "max_users",
}


def feature_enabled(plan: Union[str, SubscriptionPlan], feature: str) -> bool:
    """Boolean flags answer for themselves; numeric and unlimited limits count as enabled"""
    value = plan_feature_value(plan, feature)
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def evaluate_quota(used: int, limit: Limit) -> QuotaCheck:
    if is_unlimited(limit):
        return QuotaCheck(allowed=True, current_usage=used, limit=limit)

    if limit == 0:
        return QuotaCheck(
            allowed=False,
            current_usage=used,
            limit=limit,
            reason="Configuration de limite invalide",
        )

    allowed = used < limit
    return QuotaCheck(
        allowed=allowed,
        current_usage=used,
        limit=limit,
        reason=None if allowed else f"Limite atteinte : {used}/{limit}",
    )


def compute_quota_status(used: int, limit: Limit) -> QuotaStatus:
    if is_unlimited(limit):
        return QuotaStatus(
            used=used,
            limit=limit,
            percentage=0,
            is_near_limit=False,
            is_at_limit=False,
        )

    percentage = (used / limit) * 100 if limit > 0 else 0
    return QuotaStatus(
        used=used,
        limit=limit,
        percentage=min(percentage, 100),
        is_near_limit=percentage >= NEAR_LIMIT_THRESHOLD,
        is_at_limit=percentage >= AT_LIMIT_THRESHOLD,
    )


def start_of_day(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.utcnow()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


async def get_restaurant_plan(db: AsyncSession, restaurant_id: UUID) -> SubscriptionPlan:
    """Plan of the current active or trial subscription, starter otherwise"""
    result = await db.execute(
        select(Subscription.plan)
        .where(
            Subscription.restaurant_id == restaurant_id,
            Subscription.status.in_(["active", "trial"]),
        )
        .order_by(Subscription.current_period_end.desc())
        .limit(1)
    )
    plan = result.scalar_one_or_none()
    if plan is None:
        return DEFAULT_PLAN
    return to_subscription_plan(plan)


async def has_feature(db: AsyncSession, restaurant_id: UUID, feature: str) -> bool:
    plan = await get_restaurant_plan(db, restaurant_id)
    return feature_enabled(plan, feature)


async def count_usage(db: AsyncSession, restaurant_id: UUID, quota: str) -> int:
    if quota == "max_tables":
        query = select(func.count(Table.id)).where(
            Table.restaurant_id == restaurant_id,
            Table.is_active == True,
        )
    elif quota == "max_products":
        query = select(func.count(Product.id)).where(Product.restaurant_id == restaurant_id)
    elif quota == "max_categories":
        query = select(func.count(Category.id)).where(
            Category.restaurant_id == restaurant_id,
            Category.is_active == True,
        )
    elif quota == "max_orders_per_day":
        query = select(func.count(Order.id)).where(
            Order.restaurant_id == restaurant_id,
            Order.created_at >= start_of_day(),
        )
    elif quota == "max_users":
        query = select(func.count(RestaurantUser.id)).where(
            RestaurantUser.restaurant_id == restaurant_id
        )
    else:
        raise ValueError(f"Unknown quota: {quota}")

    result = await db.execute(query)
    return result.scalar() or 0


async def check_quota(db: AsyncSession, restaurant_id: UUID, quota: str) -> QuotaCheck:
    plan = await get_restaurant_plan(db, restaurant_id)
    limit = get_plan_limits(plan)[quota]
    used = await count_usage(db, restaurant_id, quota)
    return evaluate_quota(used, limit)


async def get_quota_status(db: AsyncSession, restaurant_id: UUID, quota: str) -> QuotaStatus:
    plan = await get_restaurant_plan(db, restaurant_id)
    limit = get_plan_limits(plan)[quota]
    used = await count_usage(db, restaurant_id, quota)
    return compute_quota_status(used, limit)


async def get_all_features(db: AsyncSession, restaurant_id: UUID) -> FeaturesResponse:
    plan = await get_restaurant_plan(db, restaurant_id)
    limits = get_plan_limits(plan)

    quotas: Dict[str, QuotaStatus] = {}
    for name, quota in QUOTA_SUMMARY.items():
        used = await count_usage(db, restaurant_id, quota)
        quotas[name] = compute_quota_status(used, limits[quota])

    return FeaturesResponse(
        plan=plan.value,
        features=get_plan_features(plan),
        quotas=quotas,
    )


async def ensure_feature(db: AsyncSession, restaurant_id: UUID, feature: str) -> None:
    if not await has_feature(db, restaurant_id, feature):
        logger.info("Feature refused", restaurant_id=str(restaurant_id), feature=feature)
        raise FeatureNotAvailableError(feature)


async def ensure_quota(db: AsyncSession, restaurant_id: UUID, quota: str) -> QuotaCheck:
    check = await check_quota(db, restaurant_id, quota)
    if not check.allowed:
        logger.info(
            "Quota refused",
            restaurant_id=str(restaurant_id),
            quota=quota,
            used=check.current_usage,
            limit=check.limit,
        )
        raise QuotaExceededError(check.reason, detail=quota)
    return check
