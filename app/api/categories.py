"""Menu category API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.menu import Category, Product
from app.models.user import User, RestaurantRole
from app.schemas.menu import CategoryCreate, CategoryUpdate, CategoryResponse
from app.api.auth import get_current_active_user, verify_restaurant_access
from app.subscription.dependencies import enforce_quota

router = APIRouter()


async def get_category(db: AsyncSession, restaurant_id: UUID, category_id: UUID) -> Category:
    result = await db.execute(
        select(Category).where(Category.id == category_id, Category.restaurant_id == restaurant_id)
    )
    category = result.scalar_one_or_none()
    if not category:
        raise HTTPException(status_code=404, detail="Catégorie introuvable")
    return category


@router.get("", response_model=List[CategoryResponse])
async def list_categories(
    restaurant_id: UUID,
    is_active: Optional[bool] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List menu categories"""
    await verify_restaurant_access(db, restaurant_id, current_user)

    query = select(Category).where(Category.restaurant_id == restaurant_id)
    if is_active is not None:
        query = query.where(Category.is_active == is_active)

    result = await db.execute(query.order_by(Category.display_order, Category.name))
    return result.scalars().all()


@router.post("", response_model=CategoryResponse, status_code=201)
async def create_category(
    restaurant_id: UUID,
    category_data: CategoryCreate,
    current_user: User = Depends(enforce_quota("max_categories", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Create a menu category"""
    category = Category(restaurant_id=restaurant_id, **category_data.model_dump())
    db.add(category)
    await db.commit()
    await db.refresh(category)

    return category


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    restaurant_id: UUID,
    category_id: UUID,
    category_data: CategoryUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update or toggle a category"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.MANAGER)
    category = await get_category(db, restaurant_id, category_id)

    for field, value in category_data.model_dump(exclude_unset=True).items():
        setattr(category, field, value)

    await db.commit()
    await db.refresh(category)

    return category


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    restaurant_id: UUID,
    category_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete an empty category"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.MANAGER)
    category = await get_category(db, restaurant_id, category_id)

    result = await db.execute(
        select(func.count(Product.id)).where(Product.category_id == category_id)
    )
    product_count = result.scalar()
    if product_count:
        raise HTTPException(
            status_code=400,
            detail=f"Impossible de supprimer : {product_count} produit(s) dans cette catégorie",
        )

    await db.delete(category)
    await db.commit()
