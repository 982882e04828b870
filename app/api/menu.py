"""Product (menu item) API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.menu import Category, Product
from app.models.order import OrderItem
from app.models.stock import Stock, StockMovement
from app.models.user import User, RestaurantRole
from app.schemas.menu import ProductCreate, ProductUpdate, ProductResponse
from app.api.auth import get_current_active_user, verify_restaurant_access
from app.services.stock import DEFAULT_ALERT_THRESHOLD
from app.subscription.dependencies import enforce_quota

router = APIRouter()
logger = structlog.get_logger()


async def get_product(db: AsyncSession, restaurant_id: UUID, product_id: UUID) -> Product:
    result = await db.execute(
        select(Product).where(Product.id == product_id, Product.restaurant_id == restaurant_id)
    )
    product = result.scalar_one_or_none()
    if not product:
        raise HTTPException(status_code=404, detail="Produit introuvable")
    return product


async def check_category(db: AsyncSession, restaurant_id: UUID, category_id: Optional[UUID]) -> None:
    if category_id is None:
        return
    result = await db.execute(
        select(Category.id).where(Category.id == category_id, Category.restaurant_id == restaurant_id)
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(status_code=400, detail="Catégorie invalide")


@router.get("", response_model=List[ProductResponse])
async def list_products(
    restaurant_id: UUID,
    category_id: Optional[UUID] = None,
    is_available: Optional[bool] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List products of a restaurant"""
    await verify_restaurant_access(db, restaurant_id, current_user)

    query = select(Product).where(Product.restaurant_id == restaurant_id)

    if category_id:
        query = query.where(Product.category_id == category_id)

    if is_available is not None:
        query = query.where(Product.is_available == is_available)

    query = query.order_by(Product.display_order, Product.name)

    result = await db.execute(query)
    return result.scalars().all()


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    restaurant_id: UUID,
    product_data: ProductCreate,
    current_user: User = Depends(enforce_quota("max_products", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Create a product and its empty stock row"""
    if product_data.price < 0:
        raise HTTPException(status_code=400, detail="Le prix ne peut pas être négatif")
    await check_category(db, restaurant_id, product_data.category_id)

    product = Product(restaurant_id=restaurant_id, **product_data.model_dump())
    db.add(product)
    await db.flush()

    db.add(Stock(
        restaurant_id=restaurant_id,
        product_id=product.id,
        quantity=0,
        alert_threshold=DEFAULT_ALERT_THRESHOLD,
    ))

    await db.commit()
    await db.refresh(product)

    logger.info("Product created", restaurant_id=str(restaurant_id), product_id=str(product.id))
    return product


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product_detail(
    restaurant_id: UUID,
    product_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific product"""
    await verify_restaurant_access(db, restaurant_id, current_user)
    return await get_product(db, restaurant_id, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    restaurant_id: UUID,
    product_id: UUID,
    product_data: ProductUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a product"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.MANAGER)
    product = await get_product(db, restaurant_id, product_id)

    updates = product_data.model_dump(exclude_unset=True)
    if updates.get("price") is not None and updates["price"] < 0:
        raise HTTPException(status_code=400, detail="Le prix ne peut pas être négatif")
    if "category_id" in updates:
        await check_category(db, restaurant_id, updates["category_id"])

    for field, value in updates.items():
        setattr(product, field, value)

    await db.commit()
    await db.refresh(product)

    return product


@router.post("/{product_id}/toggle-availability", response_model=ProductResponse)
async def toggle_product_availability(
    restaurant_id: UUID,
    product_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Mark a product available or sold out"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.CASHIER)
    product = await get_product(db, restaurant_id, product_id)

    product.is_available = not product.is_available
    await db.commit()
    await db.refresh(product)

    return product


@router.delete("/{product_id}", status_code=204)
async def delete_product(
    restaurant_id: UUID,
    product_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a product; ordered products are only withdrawn from sale"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.MANAGER)
    product = await get_product(db, restaurant_id, product_id)

    ordered = await db.execute(
        select(OrderItem.id).where(OrderItem.product_id == product_id).limit(1)
    )
    if ordered.scalar_one_or_none():
        product.is_available = False
        await db.commit()
        return

    await db.execute(StockMovement.__table__.delete().where(StockMovement.product_id == product_id))
    await db.execute(Stock.__table__.delete().where(Stock.product_id == product_id))
    await db.delete(product)
    await db.commit()
