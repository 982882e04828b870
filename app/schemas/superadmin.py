"""Back-office schemas"""

from datetime import datetime
from typing import Optional, Dict, Any, List
from uuid import UUID
from pydantic import BaseModel, Field

from app.schemas.subscription import SubscriptionResponse
from app.schemas.tenant import RestaurantResponse


class PlatformStats(BaseModel):
    """Platform-wide counters"""
    total_restaurants: int
    active_restaurants: int
    total_users: int
    total_orders: int
    total_revenue: int
    orders_today: int


class AdminRestaurantResponse(RestaurantResponse):
    """Restaurant with its subscription and sizes"""
    subscription: Optional[SubscriptionResponse] = None
    members_count: int = 0
    orders_count: int = 0


class AdminRestaurantList(BaseModel):
    """Paginated restaurants"""
    restaurants: List[AdminRestaurantResponse]
    total: int
    page: int
    page_size: int


class PaymentRejection(BaseModel):
    """Reason given when refusing a manual payment"""
    reason: str = Field(..., min_length=1)


class SystemLogResponse(BaseModel):
    """System log entry"""
    id: UUID
    restaurant_id: Optional[UUID]
    actor_id: Optional[UUID]
    actor_type: Optional[str]
    action: str
    level: Optional[str]
    resource_type: Optional[str]
    resource_id: Optional[UUID]
    data_json: Optional[Dict[str, Any]]
    created_at: datetime

    class Config:
        from_attributes = True
