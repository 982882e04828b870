"""Operational stock API endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.menu import Product
from app.models.stock import Stock, StockMovement
from app.models.user import User, RestaurantRole
from app.schemas.stock import (
    StockResponse,
    StockAdjustment,
    AlertThresholdUpdate,
    StockMovementResponse,
)
from app.services.stock import adjust_stock, validate_alert_threshold
from app.subscription.dependencies import require_feature

router = APIRouter()

HISTORY_LIMIT = 50


def to_stock_response(stock: Stock, product: Product) -> StockResponse:
    return StockResponse(
        id=stock.id,
        product_id=product.id,
        product_name=product.name,
        quantity=stock.quantity,
        alert_threshold=stock.alert_threshold,
        is_low=stock.is_low,
        is_available=product.is_available,
        updated_at=stock.updated_at,
    )


@router.get("", response_model=List[StockResponse])
async def list_stocks(
    restaurant_id: UUID,
    low_only: bool = False,
    current_user: User = Depends(require_feature("stock_management")),
    db: AsyncSession = Depends(get_db),
):
    """Stock levels of tracked products"""
    query = (
        select(Stock, Product)
        .join(Product, Product.id == Stock.product_id)
        .where(Stock.restaurant_id == restaurant_id, Product.has_stock == True)
    )
    if low_only:
        query = query.where(Stock.quantity <= Stock.alert_threshold)

    result = await db.execute(query.order_by(Product.name))
    return [to_stock_response(stock, product) for stock, product in result.all()]


@router.post("/{product_id}/adjust", response_model=StockResponse)
async def adjust_product_stock(
    restaurant_id: UUID,
    product_id: UUID,
    adjustment: StockAdjustment,
    current_user: User = Depends(require_feature("stock_management", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Manual entry, exit or inventory correction"""
    stock = await adjust_stock(
        db,
        restaurant_id,
        product_id,
        adjustment.type,
        adjustment.quantity,
        user_id=current_user.id,
        reason=adjustment.reason,
    )
    product = await db.get(Product, product_id)
    return to_stock_response(stock, product)


@router.get("/{product_id}/history", response_model=List[StockMovementResponse])
async def get_stock_history(
    restaurant_id: UUID,
    product_id: UUID,
    limit: int = Query(HISTORY_LIMIT, ge=1, le=HISTORY_LIMIT),
    current_user: User = Depends(require_feature("stock_management")),
    db: AsyncSession = Depends(get_db),
):
    """Latest stock movements of a product"""
    result = await db.execute(
        select(StockMovement)
        .where(
            StockMovement.restaurant_id == restaurant_id,
            StockMovement.product_id == product_id,
        )
        .order_by(StockMovement.created_at.desc())
        .limit(limit)
    )
    return result.scalars().all()


@router.put("/{product_id}/alert-threshold", response_model=StockResponse)
async def update_alert_threshold(
    restaurant_id: UUID,
    product_id: UUID,
    threshold_data: AlertThresholdUpdate,
    current_user: User = Depends(require_feature("stock_management", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Set the quantity at or below which a product counts as low"""
    validate_alert_threshold(threshold_data.alert_threshold)

    result = await db.execute(
        select(Stock, Product)
        .join(Product, Product.id == Stock.product_id)
        .where(Stock.restaurant_id == restaurant_id, Stock.product_id == product_id)
    )
    row = result.one_or_none()
    if row is None:
        raise HTTPException(status_code=404, detail="Stock introuvable")

    stock, product = row
    stock.alert_threshold = threshold_data.alert_threshold
    await db.commit()

    return to_stock_response(stock, product)
