"""
Cash register sessions.

A session covers one business day. Its balance aggregates three sources:
manual revenues entered at the register, order payments marked paid that
day, and expenses paid out. Only cash moves the drawer balance.
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.config import settings
from app.errors import NotFoundError, ValidationError
from app.models.cash import CashSession, Expense, ExpenseCategory, ManualRevenue
from app.models.menu import Product
from app.models.order import Payment
from app.schemas.cash import (
    BalanceFigures,
    CashSessionClose,
    CashSessionOpen,
    ExpenseBreakdown,
    ExpenseCreate,
    ManualRevenueCreate,
    RevenueBreakdown,
    SessionBalanceResponse,
)
from app.services.audit import log_system_action
from app.services.stock import PURCHASE, SALE_MANUAL, load_stocked_products, record_stock_change

logger = structlog.get_logger()

DRAWER_METHODS = ("cash",)


def difference_status(difference: Optional[int]) -> str:
    """ok for an exact count, minor within tolerance, major beyond"""
    if not difference:
        return "ok"
    if abs(difference) <= settings.cash_difference_tolerance:
        return "minor"
    return "major"


async def get_session(db: AsyncSession, restaurant_id: UUID, session_id: UUID) -> CashSession:
    result = await db.execute(
        select(CashSession)
        .where(CashSession.id == session_id, CashSession.restaurant_id == restaurant_id)
        .options(selectinload(CashSession.revenues), selectinload(CashSession.expenses))
        .execution_options(populate_existing=True)
    )
    session = result.scalar_one_or_none()
    if session is None:
        raise NotFoundError("Session introuvable")
    return session


async def list_sessions(db: AsyncSession, restaurant_id: UUID, limit: int = 31) -> List[CashSession]:
    result = await db.execute(
        select(CashSession)
        .where(CashSession.restaurant_id == restaurant_id)
        .order_by(CashSession.session_date.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


def ensure_open(session: CashSession) -> None:
    if session.status != "open":
        raise ValidationError("Cette session de caisse est clôturée")


async def open_session(
    db: AsyncSession,
    restaurant_id: UUID,
    data: CashSessionOpen,
    user_id: Optional[UUID] = None,
    today: Optional[date] = None,
) -> CashSession:
    """Open the register for a day; past days are flagged historical"""
    today = today or datetime.utcnow().date()
    if data.session_date > today:
        raise ValidationError("La date de session ne peut pas être dans le futur")

    existing = await db.execute(
        select(CashSession.id).where(
            CashSession.restaurant_id == restaurant_id,
            CashSession.session_date == data.session_date,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ValidationError(
            "Une session de caisse existe déjà pour cette date",
            detail=data.session_date.isoformat(),
        )

    session = CashSession(
        restaurant_id=restaurant_id,
        session_date=data.session_date,
        opening_balance=data.opening_balance,
        opened_by=user_id,
        is_historical=data.session_date < today,
        notes=data.notes,
    )
    db.add(session)
    await db.commit()

    logger.info(
        "Cash session opened",
        restaurant_id=str(restaurant_id),
        session_date=data.session_date.isoformat(),
        opening_balance=data.opening_balance,
    )
    return await get_session(db, restaurant_id, session.id)


async def load_product(db: AsyncSession, restaurant_id: UUID, product_id: UUID) -> Product:
    products = await load_stocked_products(db, restaurant_id, [product_id])
    product = products.get(product_id)
    if product is None:
        raise NotFoundError("Produit introuvable")
    return product


async def add_revenue(
    db: AsyncSession,
    session: CashSession,
    data: ManualRevenueCreate,
    user_id: Optional[UUID] = None,
) -> ManualRevenue:
    """Record a manual sale; a tracked good leaves the stock"""
    ensure_open(session)

    movement = None
    if data.revenue_type == "good" and data.product_id:
        product = await load_product(db, session.restaurant_id, data.product_id)
        if product.has_stock and product.stock is not None:
            current = product.stock.quantity or 0
            movement = record_stock_change(
                db,
                product,
                max(current - data.quantity, 0),
                SALE_MANUAL,
                user_id=user_id,
                reason=f"Vente manuelle : {data.description}",
                sync_availability=False,
            )
            await db.flush()

    revenue = ManualRevenue(
        restaurant_id=session.restaurant_id,
        session_id=session.id,
        description=data.description,
        quantity=data.quantity,
        unit_amount=data.unit_amount,
        total_amount=data.quantity * data.unit_amount,
        payment_method=data.payment_method.value,
        revenue_type=data.revenue_type,
        product_id=data.product_id,
        stock_movement_id=movement.id if movement else None,
        notes=data.notes,
    )
    db.add(revenue)
    await db.commit()

    logger.info(
        "Manual revenue recorded",
        session_id=str(session.id),
        total_amount=revenue.total_amount,
        method=revenue.payment_method,
    )
    return revenue


async def add_expense(
    db: AsyncSession,
    session: CashSession,
    data: ExpenseCreate,
    user_id: Optional[UUID] = None,
) -> Expense:
    """Record an expense; a stock purchase restocks the product"""
    ensure_open(session)

    movement = None
    if data.category == ExpenseCategory.STOCK_PURCHASE and data.product_id and data.quantity_added:
        product = await load_product(db, session.restaurant_id, data.product_id)
        if product.stock is None:
            raise NotFoundError("Produit introuvable dans le stock")
        movement = record_stock_change(
            db,
            product,
            (product.stock.quantity or 0) + data.quantity_added,
            PURCHASE,
            user_id=user_id,
            reason=f"Achat fournisseur : {data.description}",
        )
        await db.flush()

    expense = Expense(
        restaurant_id=session.restaurant_id,
        session_id=session.id,
        description=data.description,
        amount=data.amount,
        category=data.category.value,
        payment_method=data.payment_method.value,
        product_id=data.product_id,
        quantity_added=data.quantity_added,
        stock_movement_id=movement.id if movement else None,
        notes=data.notes,
    )
    db.add(expense)
    await db.commit()

    logger.info(
        "Expense recorded",
        session_id=str(session.id),
        amount=expense.amount,
        category=expense.category,
    )
    return expense


async def sum_by(db: AsyncSession, key, amount, *criteria) -> Dict[str, int]:
    result = await db.execute(select(key, func.sum(amount)).where(*criteria).group_by(key))
    return {row[0]: int(row[1] or 0) for row in result.all()}


def merge_totals(*groups: Dict[str, int]) -> Dict[str, int]:
    merged: Dict[str, int] = {}
    for group in groups:
        for key, value in group.items():
            merged[key] = merged.get(key, 0) + value
    return merged


async def compute_session_balance(db: AsyncSession, session: CashSession) -> SessionBalanceResponse:
    day_start = datetime.combine(session.session_date, time.min)
    day_end = day_start + timedelta(days=1)

    manual_by_method = await sum_by(
        db,
        ManualRevenue.payment_method,
        ManualRevenue.total_amount,
        ManualRevenue.session_id == session.id,
    )
    orders_by_method = await sum_by(
        db,
        Payment.method,
        Payment.amount,
        Payment.restaurant_id == session.restaurant_id,
        Payment.status == "paid",
        Payment.paid_at >= day_start,
        Payment.paid_at < day_end,
    )
    expenses_by_method = await sum_by(
        db, Expense.payment_method, Expense.amount, Expense.session_id == session.id
    )
    expenses_by_category = await sum_by(
        db, Expense.category, Expense.amount, Expense.session_id == session.id
    )

    total_manual = sum(manual_by_method.values())
    total_orders = sum(orders_by_method.values())
    total_revenue = total_manual + total_orders
    total_expenses = sum(expenses_by_method.values())

    revenue_by_method = merge_totals(manual_by_method, orders_by_method)
    cash_in = sum(revenue_by_method.get(method, 0) for method in DRAWER_METHODS)
    cash_out = sum(expenses_by_method.get(method, 0) for method in DRAWER_METHODS)

    theoretical = session.opening_balance + total_revenue - total_expenses
    difference = (
        session.closing_balance - theoretical if session.closing_balance is not None else None
    )

    return SessionBalanceResponse(
        session_id=session.id,
        session_date=session.session_date,
        status=session.status,
        revenues=RevenueBreakdown(
            manual=total_manual,
            orders=total_orders,
            total=total_revenue,
            by_method=revenue_by_method,
        ),
        expenses=ExpenseBreakdown(
            total=total_expenses,
            by_method=expenses_by_method,
            by_category=expenses_by_category,
        ),
        balance=BalanceFigures(
            opening=session.opening_balance,
            theoretical=theoretical,
            theoretical_cash=session.opening_balance + cash_in - cash_out,
            actual=session.closing_balance,
            difference=difference,
            difference_status=difference_status(difference),
        ),
    )


async def close_session(
    db: AsyncSession,
    session: CashSession,
    data: CashSessionClose,
    user_id: Optional[UUID] = None,
) -> CashSession:
    """Close the register with the counted amount and freeze the balance"""
    ensure_open(session)

    balance = await compute_session_balance(db, session)
    theoretical = balance.balance.theoretical

    session.status = "closed"
    session.closing_balance = data.closing_balance
    session.theoretical_balance = theoretical
    session.balance_difference = data.closing_balance - theoretical
    session.closed_at = datetime.utcnow()
    session.closed_by = user_id
    if data.notes:
        session.notes = data.notes

    status = difference_status(session.balance_difference)
    log_system_action(
        db,
        "cash_session_closed",
        level="warning" if status == "major" else "info",
        restaurant_id=session.restaurant_id,
        actor_id=user_id,
        resource_type="cash_session",
        resource_id=session.id,
        data={
            "session_date": session.session_date.isoformat(),
            "theoretical": theoretical,
            "closing": data.closing_balance,
            "difference": session.balance_difference,
        },
    )
    await db.commit()

    logger.info(
        "Cash session closed",
        session_id=str(session.id),
        difference=session.balance_difference,
        status=status,
    )
    return session
