"""Restaurant and membership API endpoints"""

import re
import unicodedata
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.tenant import Restaurant
from app.models.user import User, RestaurantUser, RestaurantRole
from app.schemas.tenant import (
    RestaurantCreate,
    RestaurantUpdate,
    RestaurantResponse,
    MyRestaurantResponse,
    MemberCreate,
    MemberUpdate,
    MemberResponse,
)
from app.api.auth import get_current_active_user, verify_restaurant_access
from app.services.audit import log_system_action
from app.services.subscriptions import start_trial
from app.subscription.dependencies import enforce_quota

router = APIRouter()
logger = structlog.get_logger()


def slugify(value: str) -> str:
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug or "restaurant"


async def unique_slug(db: AsyncSession, name: str) -> str:
    base = slugify(name)
    slug = base
    suffix = 2
    while True:
        result = await db.execute(select(Restaurant.id).where(Restaurant.slug == slug))
        if result.scalar_one_or_none() is None:
            return slug
        slug = f"{base}-{suffix}"
        suffix += 1


async def count_admins(db: AsyncSession, restaurant_id: UUID) -> int:
    result = await db.execute(
        select(func.count(RestaurantUser.id)).where(
            RestaurantUser.restaurant_id == restaurant_id,
            RestaurantUser.role == RestaurantRole.ADMIN,
        )
    )
    return result.scalar() or 0


async def get_membership(db: AsyncSession, restaurant_id: UUID, user_id: UUID) -> RestaurantUser:
    result = await db.execute(
        select(RestaurantUser).where(
            RestaurantUser.restaurant_id == restaurant_id,
            RestaurantUser.user_id == user_id,
        )
    )
    membership = result.scalar_one_or_none()
    if not membership:
        raise HTTPException(status_code=404, detail="Membre introuvable")
    return membership


@router.post("", response_model=RestaurantResponse, status_code=status.HTTP_201_CREATED)
async def create_restaurant(
    restaurant_data: RestaurantCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a restaurant, make the creator its admin and start a trial"""
    restaurant = Restaurant(
        slug=await unique_slug(db, restaurant_data.name),
        **restaurant_data.model_dump(),
    )
    db.add(restaurant)
    await db.flush()

    db.add(RestaurantUser(
        user_id=current_user.id,
        restaurant_id=restaurant.id,
        role=RestaurantRole.ADMIN,
    ))
    start_trial(db, restaurant.id)
    log_system_action(
        db,
        "restaurant_created",
        restaurant_id=restaurant.id,
        actor_id=current_user.id,
        resource_type="restaurant",
        resource_id=restaurant.id,
        data={"name": restaurant.name, "slug": restaurant.slug},
    )

    await db.commit()
    await db.refresh(restaurant)

    logger.info("Restaurant created", restaurant_id=str(restaurant.id), slug=restaurant.slug)
    return restaurant


@router.get("", response_model=List[MyRestaurantResponse])
async def list_my_restaurants(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List the restaurants the user belongs to"""
    result = await db.execute(
        select(Restaurant, RestaurantUser.role)
        .join(RestaurantUser, RestaurantUser.restaurant_id == Restaurant.id)
        .where(RestaurantUser.user_id == current_user.id)
        .order_by(Restaurant.created_at)
    )
    return [
        MyRestaurantResponse(restaurant=restaurant, role=role)
        for restaurant, role in result.all()
    ]


@router.get("/{restaurant_id}", response_model=RestaurantResponse)
async def get_restaurant(
    restaurant_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get restaurant details"""
    await verify_restaurant_access(db, restaurant_id, current_user)

    restaurant = await db.get(Restaurant, restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant introuvable")

    return restaurant


@router.put("/{restaurant_id}", response_model=RestaurantResponse)
async def update_restaurant(
    restaurant_id: UUID,
    restaurant_data: RestaurantUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update restaurant profile (admin only)"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.ADMIN)

    restaurant = await db.get(Restaurant, restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant introuvable")

    for field, value in restaurant_data.model_dump(exclude_unset=True).items():
        setattr(restaurant, field, value)

    await db.commit()
    await db.refresh(restaurant)

    return restaurant


@router.get("/{restaurant_id}/members", response_model=List[MemberResponse])
async def list_members(
    restaurant_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List restaurant members with their role"""
    await verify_restaurant_access(db, restaurant_id, current_user)

    result = await db.execute(
        select(RestaurantUser, User)
        .join(User, User.id == RestaurantUser.user_id)
        .where(RestaurantUser.restaurant_id == restaurant_id)
        .order_by(RestaurantUser.created_at)
    )
    return [
        MemberResponse(
            user_id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=membership.role,
            created_at=membership.created_at,
        )
        for membership, user in result.all()
    ]


@router.post("/{restaurant_id}/members", response_model=MemberResponse, status_code=201)
async def add_member(
    restaurant_id: UUID,
    member_data: MemberCreate,
    current_user: User = Depends(enforce_quota("max_users", RestaurantRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Add an existing account to the restaurant team"""
    result = await db.execute(select(User).where(User.email == member_data.email.lower()))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="Aucun compte avec cet email")

    existing = await db.execute(
        select(RestaurantUser).where(
            RestaurantUser.restaurant_id == restaurant_id,
            RestaurantUser.user_id == user.id,
        )
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Cet utilisateur fait déjà partie de l'équipe")

    membership = RestaurantUser(
        user_id=user.id,
        restaurant_id=restaurant_id,
        role=member_data.role,
    )
    db.add(membership)
    await db.commit()

    logger.info("Member added", restaurant_id=str(restaurant_id), user_id=str(user.id), role=member_data.role.value)
    return MemberResponse(
        user_id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=membership.role,
        created_at=membership.created_at,
    )


@router.patch("/{restaurant_id}/members/{user_id}", response_model=MemberResponse)
async def update_member(
    restaurant_id: UUID,
    user_id: UUID,
    member_data: MemberUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Change a member's role"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.ADMIN)
    membership = await get_membership(db, restaurant_id, user_id)

    if (
        membership.role == RestaurantRole.ADMIN
        and member_data.role != RestaurantRole.ADMIN
        and await count_admins(db, restaurant_id) <= 1
    ):
        raise HTTPException(status_code=400, detail="Le restaurant doit garder au moins un administrateur")

    membership.role = member_data.role
    await db.commit()

    user = await db.get(User, user_id)
    return MemberResponse(
        user_id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=membership.role,
        created_at=membership.created_at,
    )


@router.delete("/{restaurant_id}/members/{user_id}", status_code=204)
async def remove_member(
    restaurant_id: UUID,
    user_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Remove a member from the restaurant"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.ADMIN)
    membership = await get_membership(db, restaurant_id, user_id)

    if membership.role == RestaurantRole.ADMIN and await count_admins(db, restaurant_id) <= 1:
        raise HTTPException(status_code=400, detail="Le restaurant doit garder au moins un administrateur")

    await db.delete(membership)
    await db.commit()
