"""Operational stock changes and their movement journal"""

from typing import Dict, Iterable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.errors import NotFoundError, ValidationError
from app.models.menu import Product
from app.models.order import Order
from app.models.stock import Stock, StockMovement

logger = structlog.get_logger()

MANUAL_IN = "manual_in"
MANUAL_OUT = "manual_out"
ADJUSTMENT = "adjustment"
ORDER = "order"
TRANSFER = "transfer"
SALE_MANUAL = "sale_manual"
PURCHASE = "purchase"

ADJUSTMENT_TYPES = (MANUAL_IN, MANUAL_OUT, ADJUSTMENT)

DEFAULT_ALERT_THRESHOLD = 5
MAX_ALERT_THRESHOLD = 1000


async def load_stocked_products(
    db: AsyncSession,
    restaurant_id: UUID,
    product_ids: Iterable[UUID],
) -> Dict[UUID, Product]:
    """Products of the restaurant keyed by id, with their stock row"""
    ids = list(set(product_ids))
    if not ids:
        return {}
    result = await db.execute(
        select(Product)
        .where(Product.restaurant_id == restaurant_id, Product.id.in_(ids))
        .options(selectinload(Product.stock))
    )
    return {product.id: product for product in result.scalars().all()}


def record_stock_change(
    db: AsyncSession,
    product: Product,
    new_qty: int,
    movement_type: str,
    user_id: Optional[UUID] = None,
    order_id: Optional[UUID] = None,
    reason: Optional[str] = None,
    sync_availability: bool = True,
) -> StockMovement:
    """
    Set the new quantity, update availability and journal the movement.

    With ``sync_availability`` the product is on sale exactly when it has
    stock. Without it, availability is only ever switched off, at 0, so a
    product withdrawn by hand stays withdrawn.
    """
    stock = product.stock
    previous_qty = stock.quantity or 0

    stock.quantity = new_qty
    if sync_availability:
        product.is_available = new_qty > 0
    elif new_qty <= 0:
        product.is_available = False

    movement = StockMovement(
        restaurant_id=product.restaurant_id,
        product_id=product.id,
        user_id=user_id,
        order_id=order_id,
        type=movement_type,
        quantity=new_qty - previous_qty,
        previous_qty=previous_qty,
        new_qty=new_qty,
        reason=reason,
    )
    db.add(movement)
    return movement


async def adjust_stock(
    db: AsyncSession,
    restaurant_id: UUID,
    product_id: UUID,
    movement_type: str,
    quantity: int,
    user_id: Optional[UUID] = None,
    reason: Optional[str] = None,
) -> Stock:
    """Manual entry, exit or inventory correction of a product's stock"""
    if movement_type not in ADJUSTMENT_TYPES:
        raise ValidationError("Type de mouvement invalide")
    if quantity < 0:
        raise ValidationError("La quantité doit être positive")

    products = await load_stocked_products(db, restaurant_id, [product_id])
    product = products.get(product_id)
    if product is None or product.stock is None:
        raise NotFoundError("Stock introuvable")

    current = product.stock.quantity or 0
    if movement_type == MANUAL_IN:
        new_qty = current + quantity
    elif movement_type == MANUAL_OUT:
        if quantity > current:
            raise ValidationError("Stock insuffisant pour cette sortie")
        new_qty = current - quantity
    else:
        new_qty = quantity

    record_stock_change(db, product, new_qty, movement_type, user_id=user_id, reason=reason)
    await db.commit()

    logger.info(
        "Stock adjusted",
        restaurant_id=str(restaurant_id),
        product_id=str(product_id),
        type=movement_type,
        previous_qty=current,
        new_qty=new_qty,
    )
    return product.stock


def validate_alert_threshold(threshold: int) -> None:
    if threshold < 0:
        raise ValidationError("Le seuil doit être un nombre positif")
    if threshold > MAX_ALERT_THRESHOLD:
        raise ValidationError(f"Le seuil ne peut pas dépasser {MAX_ALERT_THRESHOLD}")


def find_stock_shortages(order_items, products: Dict[UUID, Product]) -> list:
    """Error messages for requested lines whose stock cannot cover the quantity"""
    requested: Dict[UUID, int] = {}
    for item in order_items:
        requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity

    errors = []
    for product_id, quantity in requested.items():
        product = products.get(product_id)
        if product is None or not product.has_stock or product.stock is None:
            continue
        if product.stock.quantity < quantity:
            errors.append(f"Stock insuffisant pour {product.name}")
    return errors


async def deduct_order_stock(
    db: AsyncSession,
    order: Order,
    user_id: Optional[UUID] = None,
) -> None:
    """Decrement stock for every tracked product of the order, once"""
    if order.stock_deducted:
        return

    products = await load_stocked_products(
        db, order.restaurant_id, [item.product_id for item in order.items if item.product_id]
    )

    for item in order.items:
        product = products.get(item.product_id)
        if product is None or not product.has_stock or product.stock is None:
            continue
        new_qty = max((product.stock.quantity or 0) - item.quantity, 0)
        record_stock_change(
            db,
            product,
            new_qty,
            ORDER,
            user_id=user_id,
            order_id=order.id,
            reason=f"Commande {order.order_number}",
            sync_availability=False,
        )

    order.stock_deducted = True
    logger.info("Order stock deducted", order_id=str(order.id))
