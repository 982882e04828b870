"""Order management API endpoints"""

from typing import List, Optional
from uuid import UUID
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.database import get_db
from app.models.order import Order, OrderSource, Payment, PaymentStatus, CounterPaymentMode
from app.models.tenant import Table
from app.models.user import User, RestaurantRole
from app.schemas.order import (
    OrderCreate,
    CounterOrderCreate,
    OrderStatusUpdate,
    MarkPaidRequest,
    OrderResponse,
    OrderDetailResponse,
    OrderListResponse,
    TransitionsResponse,
)
from app.api.auth import get_current_active_user, verify_restaurant_access
from app.services.order_status import ACTIVE_STATUSES, allowed_transitions, apply_status_change
from app.services.orders import counter_order_number, get_order_with_items, place_order
from app.services.stock import deduct_order_stock
from app.subscription.dependencies import enforce_quota, require_feature

router = APIRouter()
logger = structlog.get_logger()


async def load_order(db: AsyncSession, restaurant_id: UUID, order_id: UUID, with_payments: bool = False) -> Order:
    order = await get_order_with_items(db, order_id, restaurant_id, with_payments=with_payments)
    if not order:
        raise HTTPException(status_code=404, detail="Commande introuvable ou accès refusé")
    return order


@router.get("", response_model=OrderListResponse)
async def list_orders(
    restaurant_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    source: Optional[str] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    include_archived: bool = False,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List orders for a restaurant with pagination"""
    await verify_restaurant_access(db, restaurant_id, current_user)

    query = select(Order).where(Order.restaurant_id == restaurant_id)
    count_query = select(func.count(Order.id)).where(Order.restaurant_id == restaurant_id)

    if not include_archived:
        query = query.where(Order.is_archived == False)
        count_query = count_query.where(Order.is_archived == False)

    if status:
        query = query.where(Order.status == status)
        count_query = count_query.where(Order.status == status)

    if source:
        query = query.where(Order.source == source)
        count_query = count_query.where(Order.source == source)

    if from_date:
        query = query.where(Order.created_at >= from_date)
        count_query = count_query.where(Order.created_at >= from_date)

    if to_date:
        query = query.where(Order.created_at <= to_date)
        count_query = count_query.where(Order.created_at <= to_date)

    total_result = await db.execute(count_query)
    total = total_result.scalar()

    offset = (page - 1) * page_size
    query = (
        query.options(selectinload(Order.items))
        .order_by(Order.created_at.desc())
        .offset(offset)
        .limit(page_size)
    )

    result = await db.execute(query)
    orders = result.scalars().all()

    return OrderListResponse(
        items=[OrderResponse.model_validate(order) for order in orders],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/active", response_model=List[OrderResponse])
async def list_active_orders(
    restaurant_id: UUID,
    current_user: User = Depends(require_feature("kitchen_display")),
    db: AsyncSession = Depends(get_db),
):
    """Kitchen display: orders not yet delivered, oldest first"""
    result = await db.execute(
        select(Order)
        .where(
            Order.restaurant_id == restaurant_id,
            Order.status.in_(ACTIVE_STATUSES),
        )
        .options(selectinload(Order.items))
        .order_by(Order.created_at)
    )
    return result.scalars().all()


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(
    restaurant_id: UUID,
    order_data: OrderCreate,
    current_user: User = Depends(enforce_quota("max_orders_per_day")),
    db: AsyncSession = Depends(get_db),
):
    """Create an order from the dashboard"""
    table_label = None
    if order_data.table_id:
        table = await db.get(Table, order_data.table_id)
        if not table or table.restaurant_id != restaurant_id:
            raise HTTPException(status_code=400, detail="Table invalide")
        table_label = table.label or f"Table {table.number}"

    order = await place_order(
        db,
        restaurant_id,
        OrderSource.DASHBOARD,
        order_data.items,
        table_id=order_data.table_id,
        table_label=table_label,
        customer_name=order_data.customer_name,
        customer_phone=order_data.customer_phone,
        notes=order_data.notes,
        created_by=current_user.id,
    )
    await db.commit()

    return order


@router.post("/counter", response_model=OrderDetailResponse, status_code=201)
async def create_counter_order(
    restaurant_id: UUID,
    order_data: CounterOrderCreate,
    current_user: User = Depends(enforce_quota("max_orders_per_day", RestaurantRole.CASHIER)),
    db: AsyncSession = Depends(get_db),
):
    """
    Point-of-sale order.

    ``pay_now`` records a paid payment and deducts stock immediately.
    ``pay_later`` leaves a pending cash payment; stock is deducted when the
    order first moves forward.
    """
    pay_now = order_data.mode == CounterPaymentMode.PAY_NOW
    if pay_now and order_data.payment_method is None:
        raise HTTPException(status_code=400, detail="Méthode de paiement requise")

    if pay_now:
        payment_fields = {
            "method": order_data.payment_method.value,
            "status": PaymentStatus.PAID.value,
            "timing": "before_meal",
            "paid_at": datetime.utcnow(),
        }
    else:
        payment_fields = {
            "method": order_data.payment_method.value if order_data.payment_method else "cash",
            "status": PaymentStatus.PENDING.value,
            "timing": "after_meal",
        }

    order = await place_order(
        db,
        restaurant_id,
        OrderSource.COUNTER,
        order_data.items,
        order_number=counter_order_number(),
        payment_fields=payment_fields,
        customer_name=order_data.customer_name or "Client comptoir",
        notes=order_data.notes,
        created_by=current_user.id,
    )

    if pay_now:
        await deduct_order_stock(db, order, user_id=current_user.id)
    await db.commit()

    logger.info(
        "Counter order created",
        order_id=str(order.id),
        mode=order_data.mode.value,
        total_amount=order.total_amount,
    )
    return order


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    restaurant_id: UUID,
    order_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get order details with payments"""
    await verify_restaurant_access(db, restaurant_id, current_user)
    return await load_order(db, restaurant_id, order_id, with_payments=True)


@router.get("/{order_id}/transitions", response_model=TransitionsResponse)
async def get_order_transitions(
    restaurant_id: UUID,
    order_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Statuses the order can move to from its current one"""
    await verify_restaurant_access(db, restaurant_id, current_user)
    order = await load_order(db, restaurant_id, order_id)

    return TransitionsResponse(
        order_id=order.id,
        source=order.source,
        status=order.status,
        allowed=allowed_transitions(order.source, order.status),
    )


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    restaurant_id: UUID,
    order_id: UUID,
    status_data: OrderStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Move an order along the flow allowed for its source"""
    await verify_restaurant_access(db, restaurant_id, current_user)
    order = await load_order(db, restaurant_id, order_id)

    await apply_status_change(db, order, status_data.status, user_id=current_user.id)
    await db.commit()

    return order


@router.post("/{order_id}/mark-paid", response_model=OrderDetailResponse)
async def mark_order_paid(
    restaurant_id: UUID,
    order_id: UUID,
    payment_data: MarkPaidRequest,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Settle the pending payment of an order, or record a new paid one"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.CASHIER)
    order = await load_order(db, restaurant_id, order_id, with_payments=True)

    now = datetime.utcnow()
    pending = next((p for p in order.payments if p.status == PaymentStatus.PENDING.value), None)

    if pending:
        pending.status = PaymentStatus.PAID.value
        pending.method = payment_data.method.value
        pending.paid_at = now
    elif any(p.status == PaymentStatus.PAID.value for p in order.payments):
        raise HTTPException(status_code=400, detail="Cette commande est déjà payée")
    else:
        payment = Payment(
            order_id=order.id,
            restaurant_id=restaurant_id,
            amount=order.total_amount,
            method=payment_data.method.value,
            status=PaymentStatus.PAID.value,
            timing="after_meal",
            paid_at=now,
        )
        db.add(payment)
        order.payments.append(payment)

    await db.commit()

    logger.info("Order marked paid", order_id=str(order.id), method=payment_data.method.value)
    return order
