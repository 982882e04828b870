"""Platform back-office API endpoints"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.database import get_db
from app.models.audit import SystemLog
from app.models.order import Order
from app.models.subscription import SubscriptionPayment
from app.models.tenant import Restaurant
from app.models.user import User, RestaurantUser
from app.schemas.subscription import SubscriptionPaymentResponse
from app.schemas.superadmin import (
    PlatformStats,
    AdminRestaurantResponse,
    AdminRestaurantList,
    PaymentRejection,
    SystemLogResponse,
)
from app.api.auth import require_super_admin
from app.services.audit import log_system_action
from app.services.order_status import READY, DELIVERED
from app.services.subscriptions import confirm_subscription_payment, fail_subscription_payment
from app.subscription.checker import start_of_day

router = APIRouter()
logger = structlog.get_logger()


async def get_restaurant(db: AsyncSession, restaurant_id: UUID) -> Restaurant:
    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.id == restaurant_id)
        .options(selectinload(Restaurant.subscription))
    )
    restaurant = result.scalar_one_or_none()
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant introuvable")
    return restaurant


async def get_payment(db: AsyncSession, payment_id: UUID) -> SubscriptionPayment:
    payment = await db.get(SubscriptionPayment, payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Paiement introuvable")
    return payment


async def to_admin_restaurant(db: AsyncSession, restaurant: Restaurant) -> AdminRestaurantResponse:
    members_count = await db.scalar(
        select(func.count(RestaurantUser.id)).where(RestaurantUser.restaurant_id == restaurant.id)
    )
    orders_count = await db.scalar(
        select(func.count(Order.id)).where(Order.restaurant_id == restaurant.id)
    )
    response = AdminRestaurantResponse.model_validate(restaurant)
    response.members_count = members_count or 0
    response.orders_count = orders_count or 0
    return response


@router.get("/stats", response_model=PlatformStats)
async def get_platform_stats(
    current_user: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Platform-wide counters; revenue counts ready and delivered orders"""
    total_restaurants = await db.scalar(select(func.count(Restaurant.id)))
    active_restaurants = await db.scalar(
        select(func.count(Restaurant.id)).where(Restaurant.is_active == True)
    )
    total_users = await db.scalar(select(func.count(RestaurantUser.id)))
    total_orders = await db.scalar(select(func.count(Order.id)))
    total_revenue = await db.scalar(
        select(func.coalesce(func.sum(Order.total_amount), 0)).where(
            Order.status.in_([READY, DELIVERED])
        )
    )
    orders_today = await db.scalar(
        select(func.count(Order.id)).where(Order.created_at >= start_of_day())
    )

    return PlatformStats(
        total_restaurants=total_restaurants or 0,
        active_restaurants=active_restaurants or 0,
        total_users=total_users or 0,
        total_orders=total_orders or 0,
        total_revenue=total_revenue or 0,
        orders_today=orders_today or 0,
    )


@router.get("/restaurants", response_model=AdminRestaurantList)
async def list_restaurants(
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """All restaurants with their subscription"""
    query = select(Restaurant)
    if search:
        query = query.where(Restaurant.name.ilike(f"%{search}%"))
    if is_active is not None:
        query = query.where(Restaurant.is_active == is_active)

    total = await db.scalar(select(func.count()).select_from(query.subquery()))

    result = await db.execute(
        query.options(selectinload(Restaurant.subscription))
        .order_by(Restaurant.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return AdminRestaurantList(
        restaurants=[await to_admin_restaurant(db, r) for r in result.scalars().all()],
        total=total or 0,
        page=page,
        page_size=page_size,
    )


@router.get("/restaurants/{restaurant_id}", response_model=AdminRestaurantResponse)
async def get_restaurant_detail(
    restaurant_id: UUID,
    current_user: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    restaurant = await get_restaurant(db, restaurant_id)
    return await to_admin_restaurant(db, restaurant)


@router.post("/restaurants/{restaurant_id}/toggle-status", response_model=AdminRestaurantResponse)
async def toggle_restaurant_status(
    restaurant_id: UUID,
    current_user: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Suspend or reactivate a restaurant"""
    restaurant = await get_restaurant(db, restaurant_id)
    restaurant.is_active = not restaurant.is_active
    restaurant.updated_at = datetime.utcnow()

    log_system_action(
        db,
        "restaurant_activated" if restaurant.is_active else "restaurant_suspended",
        level="info" if restaurant.is_active else "warning",
        restaurant_id=restaurant.id,
        actor_id=current_user.id,
        resource_type="restaurant",
        resource_id=restaurant.id,
        data={"name": restaurant.name},
    )
    await db.commit()

    logger.info("Restaurant status toggled", restaurant_id=str(restaurant.id), is_active=restaurant.is_active)
    return await to_admin_restaurant(db, restaurant)


@router.get("/payments", response_model=List[SubscriptionPaymentResponse])
async def list_subscription_payments(
    status: Optional[str] = None,
    current_user: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Subscription payments, newest first"""
    query = select(SubscriptionPayment).order_by(SubscriptionPayment.created_at.desc())
    if status:
        query = query.where(SubscriptionPayment.status == status)
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/payments/{payment_id}/validate", response_model=SubscriptionPaymentResponse)
async def validate_subscription_payment(
    payment_id: UUID,
    current_user: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Confirm a manual payment and activate the subscription"""
    payment = await get_payment(db, payment_id)
    await confirm_subscription_payment(db, payment, validated_by=current_user.id)
    await db.commit()
    return payment


@router.post("/payments/{payment_id}/reject", response_model=SubscriptionPaymentResponse)
async def reject_subscription_payment(
    payment_id: UUID,
    rejection: PaymentRejection,
    current_user: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    payment = await get_payment(db, payment_id)
    fail_subscription_payment(db, payment, reason=rejection.reason, actor_id=current_user.id)
    await db.commit()

    logger.info("Subscription payment rejected", payment_id=str(payment.id))
    return payment


@router.get("/logs", response_model=List[SystemLogResponse])
async def list_system_logs(
    level: Optional[str] = None,
    action: Optional[str] = None,
    restaurant_id: Optional[UUID] = None,
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Recent business events"""
    query = select(SystemLog)
    if level:
        query = query.where(SystemLog.level == level)
    if action:
        query = query.where(SystemLog.action == action)
    if restaurant_id:
        query = query.where(SystemLog.restaurant_id == restaurant_id)
    result = await db.execute(query.order_by(SystemLog.created_at.desc()).limit(limit))
    return result.scalars().all()
