"""Order placement shared by the customer, dashboard and counter channels"""

import random
from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.errors import ValidationError
from app.models.order import Order, OrderItem, OrderSource, Payment
from app.schemas.order import OrderItemCreate
from app.services.stock import find_stock_shortages, load_stocked_products

logger = structlog.get_logger()


async def next_order_number(db: AsyncSession, restaurant_id: UUID) -> str:
    """Sequential customer-facing number, e.g. #007"""
    result = await db.execute(
        select(func.count(Order.id)).where(
            Order.restaurant_id == restaurant_id,
            Order.source != OrderSource.COUNTER.value,
        )
    )
    count = result.scalar() or 0
    return f"#{count + 1:03d}"


def counter_order_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"POS-{now:%H%M%S}-{random.randint(100, 999)}"


async def build_order_items(
    db: AsyncSession,
    restaurant_id: UUID,
    items: Sequence[OrderItemCreate],
) -> List[OrderItem]:
    """
    Resolve requested lines against the menu.

    Prices and names come from the database. Every product must belong to
    the restaurant, be available and have enough stock.
    """
    products = await load_stocked_products(db, restaurant_id, [item.product_id for item in items])

    for item in items:
        product = products.get(item.product_id)
        if product is None:
            raise ValidationError("Produit introuvable", detail=str(item.product_id))
        if not product.is_available:
            raise ValidationError(f"{product.name} n'est plus disponible")

    shortages = find_stock_shortages(items, products)
    if shortages:
        raise ValidationError(" · ".join(shortages))

    return [
        OrderItem(
            product_id=item.product_id,
            product_name=products[item.product_id].name,
            quantity=item.quantity,
            unit_price=products[item.product_id].price,
            notes=item.notes,
        )
        for item in items
    ]


async def place_order(
    db: AsyncSession,
    restaurant_id: UUID,
    source: OrderSource,
    items: Sequence[OrderItemCreate],
    order_number: Optional[str] = None,
    payment_fields: Optional[dict] = None,
    **fields,
) -> Order:
    """
    Create a pending order with its lines; the caller commits.

    ``payment_fields`` attaches a payment for the order total.
    """
    order_items = await build_order_items(db, restaurant_id, items)

    if order_number is None:
        order_number = await next_order_number(db, restaurant_id)

    total_amount = sum(item.unit_price * item.quantity for item in order_items)
    payments = []
    if payment_fields is not None:
        payments.append(Payment(restaurant_id=restaurant_id, amount=total_amount, **payment_fields))

    order = Order(
        restaurant_id=restaurant_id,
        source=source.value,
        order_number=order_number,
        status="pending",
        total_amount=total_amount,
        stock_deducted=False,
        items=order_items,
        payments=payments,
        **fields,
    )
    db.add(order)
    await db.flush()

    logger.info(
        "Order placed",
        order_id=str(order.id),
        restaurant_id=str(restaurant_id),
        source=source.value,
        total_amount=order.total_amount,
    )
    return order


async def get_order_with_items(
    db: AsyncSession,
    order_id: UUID,
    restaurant_id: Optional[UUID] = None,
    with_payments: bool = False,
) -> Optional[Order]:
    query = select(Order).where(Order.id == order_id).options(selectinload(Order.items))
    if restaurant_id is not None:
        query = query.where(Order.restaurant_id == restaurant_id)
    if with_payments:
        query = query.options(selectinload(Order.payments))
    result = await db.execute(query)
    return result.scalar_one_or_none()
