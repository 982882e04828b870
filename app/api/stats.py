"""Restaurant statistics API endpoints"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.user import User, RestaurantRole
from app.schemas.stats import (
    CategorySales,
    DailySales,
    DashboardStats,
    OrdersStats,
    PeriodRange,
    RecentOrder,
    RevenueStats,
    TopProduct,
)
from app.services import stats
from app.services.audit import log_system_action
from app.subscription.dependencies import require_feature

router = APIRouter()
logger = structlog.get_logger()

PERIOD_PATTERN = "^(today|week|month|custom)$"


def period_range(
    period: str = Query("today", pattern=PERIOD_PATTERN),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> PeriodRange:
    """Reporting window from the query string"""
    return stats.get_period_range(period, start_date, end_date)


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(
    restaurant_id: UUID,
    period: PeriodRange = Depends(period_range),
    current_user: User = Depends(require_feature("basic_stats", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Everything the stats page shows, in one call"""
    return await stats.get_dashboard_stats(db, restaurant_id, period)


@router.get("/revenue", response_model=RevenueStats)
async def get_revenue(
    restaurant_id: UUID,
    period: PeriodRange = Depends(period_range),
    current_user: User = Depends(require_feature("basic_stats", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    return await stats.get_revenue_stats(db, restaurant_id, period)


@router.get("/orders", response_model=OrdersStats)
async def get_orders(
    restaurant_id: UUID,
    period: PeriodRange = Depends(period_range),
    current_user: User = Depends(require_feature("basic_stats", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    return await stats.get_orders_stats(db, restaurant_id, period)


@router.get("/recent-orders", response_model=List[RecentOrder])
async def get_recent_orders(
    restaurant_id: UUID,
    limit: int = Query(10, ge=1, le=50),
    current_user: User = Depends(require_feature("basic_stats", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    return await stats.get_recent_orders(db, restaurant_id, limit)


@router.get("/daily-sales", response_model=List[DailySales])
async def get_daily_sales(
    restaurant_id: UUID,
    period: PeriodRange = Depends(period_range),
    current_user: User = Depends(require_feature("advanced_stats", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    return await stats.get_daily_sales(db, restaurant_id, period)


@router.get("/top-products", response_model=List[TopProduct])
async def get_top_products(
    restaurant_id: UUID,
    period: PeriodRange = Depends(period_range),
    limit: int = Query(5, ge=1, le=50),
    current_user: User = Depends(require_feature("advanced_stats", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    return await stats.get_top_products(db, restaurant_id, period, limit)


@router.get("/categories", response_model=List[CategorySales])
async def get_sales_by_category(
    restaurant_id: UUID,
    period: PeriodRange = Depends(period_range),
    current_user: User = Depends(require_feature("advanced_stats", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    return await stats.get_sales_by_category(db, restaurant_id, period)


@router.get("/export/orders")
async def export_orders(
    restaurant_id: UUID,
    period: PeriodRange = Depends(period_range),
    current_user: User = Depends(require_feature("data_export", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Orders of the period as a CSV download"""
    content = await stats.export_orders_csv(db, restaurant_id, period)

    log_system_action(
        db,
        "orders_exported",
        restaurant_id=restaurant_id,
        actor_id=current_user.id,
        data={"start": period.start.isoformat(), "end": period.end.isoformat()},
    )
    await db.commit()

    filename = f"commandes-{period.start:%Y%m%d}-{period.end:%Y%m%d}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
