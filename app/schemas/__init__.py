"""Pydantic schemas for request/response validation"""

from app.schemas.auth import (
    Token,
    RefreshRequest,
    UserCreate,
    AccountResponse,
    CurrentAccountResponse,
)
from app.schemas.tenant import (
    RestaurantCreate,
    RestaurantUpdate,
    RestaurantResponse,
    MemberCreate,
    MemberResponse,
    TableCreate,
    TableResponse,
)
from app.schemas.menu import (
    CategoryCreate,
    CategoryResponse,
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    PublicMenuResponse,
)
from app.schemas.order import (
    OrderCreate,
    CounterOrderCreate,
    OrderStatusUpdate,
    OrderResponse,
    OrderItemCreate,
    OrderTrackingResponse,
)
from app.schemas.subscription import (
    QuotaCheck,
    QuotaStatus,
    FeaturesResponse,
    SubscriptionResponse,
    SubscriptionPaymentCreate,
)
from app.schemas.stock import (
    StockResponse,
    StockAdjustment,
    WarehouseProductCreate,
    WarehouseTransfer,
)
from app.schemas.support import (
    TicketCreate,
    TicketResponse,
)

__all__ = [
    "Token",
    "RefreshRequest",
    "UserCreate",
    "AccountResponse",
    "CurrentAccountResponse",
    "RestaurantCreate",
    "RestaurantUpdate",
    "RestaurantResponse",
    "MemberCreate",
    "MemberResponse",
    "TableCreate",
    "TableResponse",
    "CategoryCreate",
    "CategoryResponse",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "PublicMenuResponse",
    "OrderCreate",
    "CounterOrderCreate",
    "OrderStatusUpdate",
    "OrderResponse",
    "OrderItemCreate",
    "OrderTrackingResponse",
    "QuotaCheck",
    "QuotaStatus",
    "FeaturesResponse",
    "SubscriptionResponse",
    "SubscriptionPaymentCreate",
    "StockResponse",
    "StockAdjustment",
    "WarehouseProductCreate",
    "WarehouseTransfer",
    "TicketCreate",
    "TicketResponse",
]
