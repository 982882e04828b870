"""Customer-facing endpoints: menu, QR ordering and order tracking (no auth)"""

from datetime import datetime, timedelta
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.database import get_db
from app.models.menu import Category, Product
from app.models.order import Order, OrderSource, FulfillmentType
from app.models.tenant import Restaurant, Table
from app.schemas.menu import PublicMenuResponse, PublicCategory, PublicProduct
from app.schemas.order import (
    TableOrderCreate,
    PublicOrderCreate,
    OrderTrackingResponse,
    OrderItemResponse,
    PaymentBreakdown,
)
from app.services.fees import payment_breakdown
from app.services.order_status import CANCELLED, PENDING, apply_status_change
from app.services.orders import get_order_with_items, place_order
from app.subscription.checker import ensure_quota
from app.subscription.plans import list_plans

router = APIRouter()
logger = structlog.get_logger()


def can_customer_cancel(order: Order, now: datetime = None) -> bool:
    """Customers may cancel a pending order shortly after placing it"""
    if order.status != PENDING:
        return False
    now = now or datetime.utcnow()
    return now - order.created_at <= timedelta(minutes=settings.customer_cancel_window_minutes)


def to_tracking_response(order: Order) -> OrderTrackingResponse:
    return OrderTrackingResponse(
        id=order.id,
        order_number=order.order_number,
        status=order.status,
        total_amount=order.total_amount,
        items=[OrderItemResponse.model_validate(item) for item in order.items],
        created_at=order.created_at,
        can_cancel=can_customer_cancel(order),
    )


async def get_active_restaurant(db: AsyncSession, slug: str) -> Restaurant:
    result = await db.execute(
        select(Restaurant).where(Restaurant.slug == slug, Restaurant.is_active == True)
    )
    restaurant = result.scalar_one_or_none()
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant introuvable")
    return restaurant


async def get_public_order(db: AsyncSession, order_id: UUID) -> Order:
    order = await get_order_with_items(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Commande introuvable")
    return order


@router.get("/plans")
async def get_plans():
    """Plan catalogue with prices for every billing cycle"""
    return {"plans": list_plans()}


@router.get("/restaurants/{slug}/menu", response_model=PublicMenuResponse)
async def get_public_menu(
    slug: str,
    db: AsyncSession = Depends(get_db),
):
    """Active categories with their available products"""
    restaurant = await get_active_restaurant(db, slug)

    categories_result = await db.execute(
        select(Category)
        .where(Category.restaurant_id == restaurant.id, Category.is_active == True)
        .order_by(Category.display_order, Category.name)
    )
    categories = categories_result.scalars().all()

    products_result = await db.execute(
        select(Product)
        .where(Product.restaurant_id == restaurant.id, Product.is_available == True)
        .order_by(Product.display_order, Product.name)
    )
    products = products_result.scalars().all()

    by_category = {}
    for product in products:
        by_category.setdefault(product.category_id, []).append(PublicProduct.model_validate(product))

    uncategorized: List[PublicProduct] = by_category.get(None, [])

    return PublicMenuResponse(
        restaurant_id=restaurant.id,
        name=restaurant.name,
        slug=restaurant.slug,
        logo_url=restaurant.logo_url,
        cover_image_url=restaurant.cover_image_url,
        primary_color=restaurant.primary_color,
        currency=restaurant.currency or "XAF",
        categories=[
            PublicCategory(
                id=category.id,
                name=category.name,
                description=category.description,
                products=by_category.get(category.id, []),
            )
            for category in categories
        ],
        uncategorized=uncategorized,
    )


@router.post("/restaurants/{slug}/tables/{table_number}/orders", response_model=OrderTrackingResponse, status_code=201)
async def create_table_order(
    slug: str,
    table_number: int,
    order_data: TableOrderCreate,
    db: AsyncSession = Depends(get_db),
):
    """Order placed by scanning a table QR code"""
    restaurant = await get_active_restaurant(db, slug)

    result = await db.execute(
        select(Table).where(
            Table.restaurant_id == restaurant.id,
            Table.number == table_number,
            Table.is_active == True,
        )
    )
    table = result.scalar_one_or_none()
    if not table:
        raise HTTPException(status_code=404, detail="Table introuvable")

    await ensure_quota(db, restaurant.id, "max_orders_per_day")

    order = await place_order(
        db,
        restaurant.id,
        OrderSource.QR_TABLE,
        order_data.items,
        table_id=table.id,
        table_label=table.label or f"Table {table.number}",
        fulfillment_type=FulfillmentType.TABLE.value,
        customer_name=order_data.customer_name,
        notes=order_data.notes,
    )
    await db.commit()

    logger.info("Table order received", restaurant_id=str(restaurant.id), table=table.number)
    return to_tracking_response(order)


@router.post("/restaurants/{slug}/orders", response_model=OrderTrackingResponse, status_code=201)
async def create_public_order(
    slug: str,
    order_data: PublicOrderCreate,
    db: AsyncSession = Depends(get_db),
):
    """Order placed from the restaurant's shareable link"""
    restaurant = await get_active_restaurant(db, slug)

    if order_data.fulfillment_type == FulfillmentType.DELIVERY and not order_data.delivery_address:
        raise HTTPException(status_code=400, detail="Adresse de livraison requise")

    await ensure_quota(db, restaurant.id, "max_orders_per_day")

    order = await place_order(
        db,
        restaurant.id,
        OrderSource.PUBLIC_LINK,
        order_data.items,
        fulfillment_type=order_data.fulfillment_type.value,
        customer_name=order_data.customer_name,
        customer_phone=order_data.customer_phone,
        delivery_address=order_data.delivery_address,
        table_label=order_data.table_label,
        pickup_time=order_data.pickup_time,
        notes=order_data.notes,
    )
    await db.commit()

    logger.info(
        "Public order received",
        restaurant_id=str(restaurant.id),
        fulfillment_type=order_data.fulfillment_type.value,
    )
    return to_tracking_response(order)


@router.get("/orders/{order_id}", response_model=OrderTrackingResponse)
async def track_order(
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Order status for the customer"""
    order = await get_public_order(db, order_id)
    return to_tracking_response(order)


@router.post("/orders/{order_id}/cancel", response_model=OrderTrackingResponse)
async def cancel_order(
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Customer cancellation, only while pending and within the cancel window"""
    order = await get_public_order(db, order_id)

    if order.status != PENDING:
        raise HTTPException(status_code=400, detail="Cette commande ne peut plus être annulée")

    if not can_customer_cancel(order):
        raise HTTPException(status_code=400, detail="Délai d'annulation dépassé")

    await apply_status_change(db, order, CANCELLED)
    await db.commit()

    logger.info("Order cancelled by customer", order_id=str(order.id))
    return to_tracking_response(order)


@router.get("/orders/{order_id}/payment-breakdown", response_model=PaymentBreakdown)
async def get_payment_breakdown(
    order_id: UUID,
    operator: str = Query(..., pattern="^(airtel|moov|card)$"),
    db: AsyncSession = Depends(get_db),
):
    """Commission and operator fee for paying an order online"""
    order = await get_public_order(db, order_id)
    return payment_breakdown(order.total_amount, operator)
