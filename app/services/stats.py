"""
Restaurant statistics over a reporting period.

Periods are whole UTC days: ``today``, ``week`` (the last 7 days),
``month`` (the last 30 days) or ``custom`` between two dates, bounds
included. Revenue figures only count delivered orders.
"""

import csv
import io
import math
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.errors import ValidationError
from app.models.menu import Category, Product
from app.models.order import Order, OrderItem
from app.models.stock import Stock
from app.schemas.stats import (
    CategorySales,
    DailySales,
    DashboardStats,
    OrdersStats,
    PeriodRange,
    RecentOrder,
    RevenueStats,
    StockAlertItem,
    TopProduct,
)
from app.subscription.checker import has_feature

logger = structlog.get_logger()

PERIOD_DAYS = {
    "today": 1,
    "week": 7,
    "month": 30,
}

REVENUE_STATUSES = ("delivered",)
ORDER_STATUSES = ("pending", "preparing", "ready", "delivered", "cancelled")
UNCATEGORIZED = "Sans catégorie"
STOCK_ALERT_LIMIT = 10


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def get_period_range(
    period: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> PeriodRange:
    today = (now or datetime.utcnow()).date()

    if period == "custom":
        if start_date is None or end_date is None:
            raise ValidationError(
                "Période personnalisée incomplète",
                detail="start_date et end_date sont requis",
            )
        if start_date > end_date:
            raise ValidationError(
                "Période invalide",
                detail="start_date doit précéder end_date",
            )
        first, last = start_date, end_date
    elif period in PERIOD_DAYS:
        last = today
        first = today - timedelta(days=PERIOD_DAYS[period] - 1)
    else:
        raise ValidationError("Période inconnue", detail=period)

    start = datetime.combine(first, time.min)
    end = datetime.combine(last + timedelta(days=1), time.min)
    duration = end - start
    return PeriodRange(
        start=start,
        end=end,
        previous_start=start - duration,
        previous_end=start,
    )


def delivered_in(restaurant_id: UUID, start: datetime, end: datetime) -> list:
    return [
        Order.restaurant_id == restaurant_id,
        Order.status.in_(REVENUE_STATUSES),
        Order.created_at >= start,
        Order.created_at < end,
    ]


async def get_revenue_stats(db: AsyncSession, restaurant_id: UUID, period: PeriodRange) -> RevenueStats:
    """Delivered revenue against the previous period of equal length"""
    current = (await db.execute(
        select(func.coalesce(func.sum(Order.total_amount), 0), func.count(Order.id))
        .where(*delivered_in(restaurant_id, period.start, period.end))
    )).one()
    previous = await db.scalar(
        select(func.coalesce(func.sum(Order.total_amount), 0))
        .where(*delivered_in(restaurant_id, period.previous_start, period.previous_end))
    )

    total = int(current[0])
    previous = int(previous or 0)
    change = (total - previous) / previous * 100 if previous > 0 else 0

    return RevenueStats(
        total=total,
        previous_period=previous,
        percent_change=round_half_up(change, 1),
        orders_count=current[1],
    )


async def get_orders_stats(db: AsyncSession, restaurant_id: UUID, period: PeriodRange) -> OrdersStats:
    """Order counts per status and the average order value"""
    result = await db.execute(
        select(Order.status, func.count(Order.id), func.coalesce(func.sum(Order.total_amount), 0))
        .where(
            Order.restaurant_id == restaurant_id,
            Order.created_at >= period.start,
            Order.created_at < period.end,
        )
        .group_by(Order.status)
    )

    counts: Dict[str, int] = {}
    total = 0
    amount = 0
    for status, count, status_amount in result.all():
        total += count
        amount += int(status_amount)
        if status in ORDER_STATUSES:
            counts[status] = count

    return OrdersStats(
        total=total,
        average_order_value=int(round_half_up(amount / total)) if total else 0,
        **counts,
    )


async def get_stock_alerts(
    db: AsyncSession, restaurant_id: UUID, limit: int = STOCK_ALERT_LIMIT
) -> List[StockAlertItem]:
    result = await db.execute(
        select(Stock, Product, Category.name)
        .join(Product, Product.id == Stock.product_id)
        .outerjoin(Category, Category.id == Product.category_id)
        .where(
            Stock.restaurant_id == restaurant_id,
            Product.has_stock == True,
            Stock.quantity <= Stock.alert_threshold,
        )
        .order_by(Stock.quantity)
        .limit(limit)
    )
    return [
        StockAlertItem(
            product_id=product.id,
            product_name=product.name,
            current_quantity=stock.quantity,
            alert_threshold=stock.alert_threshold,
            category_name=category_name,
        )
        for stock, product, category_name in result.all()
    ]


async def get_daily_sales(db: AsyncSession, restaurant_id: UUID, period: PeriodRange) -> List[DailySales]:
    """Delivered revenue per day, with zero days filled in"""
    result = await db.execute(
        select(Order.created_at, Order.total_amount)
        .where(*delivered_in(restaurant_id, period.start, period.end))
    )

    by_day: Dict[date, List[int]] = {}
    for created_at, amount in result.all():
        bucket = by_day.setdefault(created_at.date(), [0, 0])
        bucket[0] += amount
        bucket[1] += 1

    days = []
    day = period.start.date()
    while day < period.end.date():
        revenue, orders = by_day.get(day, (0, 0))
        days.append(DailySales(date=day, revenue=revenue, orders=orders))
        day += timedelta(days=1)
    return days


async def get_top_products(
    db: AsyncSession, restaurant_id: UUID, period: PeriodRange, limit: int = 5
) -> List[TopProduct]:
    """Best sellers by delivered quantity"""
    quantity = func.sum(OrderItem.quantity).label("quantity")
    result = await db.execute(
        select(
            OrderItem.product_id,
            OrderItem.product_name,
            quantity,
            func.sum(OrderItem.quantity * OrderItem.unit_price),
        )
        .join(Order, Order.id == OrderItem.order_id)
        .where(*delivered_in(restaurant_id, period.start, period.end))
        .group_by(OrderItem.product_id, OrderItem.product_name)
        .order_by(quantity.desc(), OrderItem.product_name)
        .limit(limit)
    )
    rows = result.all()

    product_ids = [row[0] for row in rows if row[0] is not None]
    categories: Dict[UUID, Optional[str]] = {}
    if product_ids:
        category_rows = await db.execute(
            select(Product.id, Category.name)
            .outerjoin(Category, Category.id == Product.category_id)
            .where(Product.id.in_(product_ids))
        )
        categories = dict(category_rows.all())

    return [
        TopProduct(
            product_id=product_id,
            product_name=name,
            quantity_sold=int(sold or 0),
            revenue=int(revenue or 0),
            category_name=categories.get(product_id),
        )
        for product_id, name, sold, revenue in rows
    ]


async def get_sales_by_category(db: AsyncSession, restaurant_id: UUID, period: PeriodRange) -> List[CategorySales]:
    """Delivered revenue split by menu category, largest first"""
    result = await db.execute(
        select(OrderItem.quantity, OrderItem.unit_price, Category.id, Category.name)
        .join(Order, Order.id == OrderItem.order_id)
        .outerjoin(Product, Product.id == OrderItem.product_id)
        .outerjoin(Category, Category.id == Product.category_id)
        .where(*delivered_in(restaurant_id, period.start, period.end))
    )

    groups: Dict[Optional[UUID], Dict] = {}
    for quantity, unit_price, category_id, category_name in result.all():
        group = groups.setdefault(
            category_id,
            {"name": category_name or UNCATEGORIZED, "revenue": 0, "items": 0},
        )
        group["revenue"] += quantity * unit_price
        group["items"] += 1

    total = sum(group["revenue"] for group in groups.values())
    sales = [
        CategorySales(
            category_id=category_id,
            category_name=group["name"],
            revenue=group["revenue"],
            items_count=group["items"],
            percentage=int(round_half_up(group["revenue"] / total * 100)) if total else 0,
        )
        for category_id, group in groups.items()
    ]
    return sorted(sales, key=lambda sale: sale.revenue, reverse=True)


async def get_recent_orders(db: AsyncSession, restaurant_id: UUID, limit: int = 10) -> List[RecentOrder]:
    result = await db.execute(
        select(Order)
        .where(Order.restaurant_id == restaurant_id)
        .options(selectinload(Order.items), selectinload(Order.table))
        .order_by(Order.created_at.desc())
        .limit(limit)
    )
    return [
        RecentOrder(
            id=order.id,
            order_number=order.order_number,
            table_number=order.table.number if order.table else None,
            customer_name=order.customer_name,
            total_amount=order.total_amount,
            status=order.status,
            items_count=len(order.items),
            created_at=order.created_at,
        )
        for order in result.scalars().all()
    ]


async def get_dashboard_stats(db: AsyncSession, restaurant_id: UUID, period: PeriodRange) -> DashboardStats:
    """Dashboard figures; breakdowns are left out when the plan has no advanced stats"""
    stock_alerts = []
    if await has_feature(db, restaurant_id, "stock_management"):
        stock_alerts = await get_stock_alerts(db, restaurant_id)

    dashboard = DashboardStats(
        period=period,
        revenue=await get_revenue_stats(db, restaurant_id, period),
        orders=await get_orders_stats(db, restaurant_id, period),
        recent_orders=await get_recent_orders(db, restaurant_id),
        stock_alerts=stock_alerts,
    )

    if await has_feature(db, restaurant_id, "advanced_stats"):
        dashboard.daily_sales = await get_daily_sales(db, restaurant_id, period)
        dashboard.top_products = await get_top_products(db, restaurant_id, period)
        dashboard.category_sales = await get_sales_by_category(db, restaurant_id, period)

    return dashboard


EXPORT_COLUMNS = [
    "numero",
    "date",
    "source",
    "statut",
    "client",
    "table",
    "articles",
    "total",
]


async def export_orders_csv(db: AsyncSession, restaurant_id: UUID, period: PeriodRange) -> str:
    """Every order of the period as CSV, oldest first"""
    result = await db.execute(
        select(Order)
        .where(
            Order.restaurant_id == restaurant_id,
            Order.created_at >= period.start,
            Order.created_at < period.end,
        )
        .options(selectinload(Order.items))
        .order_by(Order.created_at)
    )
    orders = result.scalars().all()

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_COLUMNS)
    for order in orders:
        writer.writerow([
            order.order_number,
            order.created_at.strftime("%Y-%m-%d %H:%M"),
            order.source,
            order.status,
            order.customer_name or "",
            order.table_label or "",
            " | ".join(f"{item.quantity} x {item.product_name}" for item in order.items),
            order.total_amount,
        ])

    logger.info("Orders exported", restaurant_id=str(restaurant_id), rows=len(orders))
    return output.getvalue()
