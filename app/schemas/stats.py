"""Restaurant statistics schemas"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel


class PeriodRange(BaseModel):
    """Half-open [start, end) window and the window of equal length before it"""
    start: datetime
    end: datetime
    previous_start: datetime
    previous_end: datetime


class RevenueStats(BaseModel):
    total: int
    previous_period: int
    percent_change: float
    orders_count: int


class OrdersStats(BaseModel):
    total: int
    pending: int = 0
    preparing: int = 0
    ready: int = 0
    delivered: int = 0
    cancelled: int = 0
    average_order_value: int


class StockAlertItem(BaseModel):
    product_id: UUID
    product_name: str
    current_quantity: int
    alert_threshold: int
    category_name: Optional[str]


class DailySales(BaseModel):
    date: date
    revenue: int
    orders: int


class TopProduct(BaseModel):
    product_id: Optional[UUID]
    product_name: str
    quantity_sold: int
    revenue: int
    category_name: Optional[str]


class CategorySales(BaseModel):
    category_id: Optional[UUID]
    category_name: str
    revenue: int
    items_count: int
    percentage: int


class RecentOrder(BaseModel):
    id: UUID
    order_number: str
    table_number: Optional[int]
    customer_name: Optional[str]
    total_amount: int
    status: str
    items_count: int
    created_at: datetime


class DashboardStats(BaseModel):
    """Basic figures always; detailed breakdowns when the plan includes them"""
    period: PeriodRange
    revenue: RevenueStats
    orders: OrdersStats
    recent_orders: List[RecentOrder]
    stock_alerts: List[StockAlertItem]
    daily_sales: Optional[List[DailySales]] = None
    top_products: Optional[List[TopProduct]] = None
    category_sales: Optional[List[CategorySales]] = None
