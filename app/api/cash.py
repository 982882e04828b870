"""Cash register API endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import get_current_active_user, verify_restaurant_access
from app.database import get_db
from app.models.user import User, RestaurantRole
from app.schemas.cash import (
    CashSessionOpen,
    CashSessionClose,
    CashSessionResponse,
    CashSessionSummary,
    ManualRevenueCreate,
    ManualRevenueResponse,
    ExpenseCreate,
    ExpenseResponse,
    SessionBalanceResponse,
)
from app.services import cash

router = APIRouter()


@router.get("/sessions", response_model=List[CashSessionSummary])
async def list_cash_sessions(
    restaurant_id: UUID,
    limit: int = Query(31, ge=1, le=366),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Latest register sessions, most recent day first"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.CASHIER)
    return await cash.list_sessions(db, restaurant_id, limit)


@router.post("/sessions", response_model=CashSessionResponse, status_code=201)
async def open_cash_session(
    restaurant_id: UUID,
    session_data: CashSessionOpen,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.CASHIER)
    return await cash.open_session(db, restaurant_id, session_data, user_id=current_user.id)


@router.get("/sessions/{session_id}", response_model=CashSessionResponse)
async def get_cash_session(
    restaurant_id: UUID,
    session_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.CASHIER)
    return await cash.get_session(db, restaurant_id, session_id)


@router.get("/sessions/{session_id}/balance", response_model=SessionBalanceResponse)
async def get_cash_session_balance(
    restaurant_id: UUID,
    session_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Theoretical and counted balance of a session"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.CASHIER)
    session = await cash.get_session(db, restaurant_id, session_id)
    return await cash.compute_session_balance(db, session)


@router.post("/sessions/{session_id}/revenues", response_model=ManualRevenueResponse, status_code=201)
async def add_manual_revenue(
    restaurant_id: UUID,
    session_id: UUID,
    revenue_data: ManualRevenueCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.CASHIER)
    session = await cash.get_session(db, restaurant_id, session_id)
    return await cash.add_revenue(db, session, revenue_data, user_id=current_user.id)


@router.post("/sessions/{session_id}/expenses", response_model=ExpenseResponse, status_code=201)
async def add_expense(
    restaurant_id: UUID,
    session_id: UUID,
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.CASHIER)
    session = await cash.get_session(db, restaurant_id, session_id)
    return await cash.add_expense(db, session, expense_data, user_id=current_user.id)


@router.post("/sessions/{session_id}/close", response_model=CashSessionResponse)
async def close_cash_session(
    restaurant_id: UUID,
    session_id: UUID,
    close_data: CashSessionClose,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Close the register with the counted amount"""
    await verify_restaurant_access(db, restaurant_id, current_user, RestaurantRole.CASHIER)
    session = await cash.get_session(db, restaurant_id, session_id)
    await cash.close_session(db, session, close_data, user_id=current_user.id)
    return await cash.get_session(db, restaurant_id, session_id)
