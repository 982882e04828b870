"""Table management API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models.order import Order
from app.models.tenant import Restaurant, Table
from app.models.user import User, RestaurantRole
from app.schemas.tenant import TableCreate, TableUpdate, TableResponse, TableQRResponse
from app.api.auth import get_current_active_user, verify_restaurant_access
from app.services.order_status import ACTIVE_STATUSES
from app.subscription.dependencies import enforce_quota

router = APIRouter()


async def get_table(db: AsyncSession, restaurant_id: UUID, table_id: UUID) -> Table:
    result = await db.execute(
        select(Table).where(Table.id == table_id, Table.restaurant_id == restaurant_id)
    )
    table = result.scalar_one_or_none()
    if not table:
        raise HTTPException(status_code=404, detail="Table introuvable")
    return table


@router.get("", response_model=List[TableResponse])
async def list_tables(
    restaurant_id: UUID,
    is_active: Optional[bool] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List tables of a restaurant"""
    await verify_restaurant_access(db, restaurant_id, current_user)

    query = select(Table).where(Table.restaurant_id == restaurant_id)
    if is_active is not None:
        query = query.where(Table.is_active == is_active)

    result = await db.execute(query.order_by(Table.number))
    return result.scalars().all()


@router.post("", response_model=TableResponse, status_code=201)
async def create_table(
    restaurant_id: UUID,
    table_data: TableCreate,
    current_user: User = Depends(enforce_quota("max_tables", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Create a table"""
    existing = await db.execute(
        select(Table.id).where(
            Table.restaurant_id == restaurant_id,
            Table.number == table_data.number,
        )
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail=f"La table {table_data.number} existe déjà")

    table = Table(restaurant_id=restaurant_id, **table_data.model_dump())
    db.add(table)
    await db.commit()
    await db.refresh(table)

    return table


@router.put("/{table_id}", response_model=TableResponse)
async def update_table(
    restaurant_id: UUID,
    table_id: UUID,
    table_data: TableUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a table"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.MANAGER)
    table = await get_table(db, restaurant_id, table_id)

    for field, value in table_data.model_dump(exclude_unset=True).items():
        setattr(table, field, value)

    await db.commit()
    await db.refresh(table)

    return table


@router.delete("/{table_id}", status_code=204)
async def delete_table(
    restaurant_id: UUID,
    table_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a table without orders in progress"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.MANAGER)
    table = await get_table(db, restaurant_id, table_id)

    result = await db.execute(
        select(func.count(Order.id)).where(
            Order.table_id == table_id,
            Order.status.in_(ACTIVE_STATUSES),
        )
    )
    if result.scalar():
        raise HTTPException(status_code=400, detail="Cette table a des commandes en cours")

    # Past orders keep their table label
    await db.execute(
        Order.__table__.update().where(Order.table_id == table_id).values(table_id=None)
    )
    await db.delete(table)
    await db.commit()


@router.get("/{table_id}/qr-url", response_model=TableQRResponse)
async def get_table_qr_url(
    restaurant_id: UUID,
    table_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """URL to encode in the table's QR code"""
    await verify_restaurant_access(db, restaurant_id, current_user)
    table = await get_table(db, restaurant_id, table_id)
    restaurant = await db.get(Restaurant, restaurant_id)

    return TableQRResponse(
        table_id=table.id,
        number=table.number,
        url=f"{settings.app_url}/r/{restaurant.slug}/t/{table.number}",
    )
