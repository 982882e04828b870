"""Order schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field

from app.models.order import OrderStatus, FulfillmentType, PaymentMethod, CounterPaymentMode


class OrderItemCreate(BaseModel):
    """Order line request: prices are always read from the menu"""
    product_id: UUID
    quantity: int = Field(1, ge=1, le=100)
    notes: Optional[str] = None


class OrderCreate(BaseModel):
    """Dashboard order request"""
    items: List[OrderItemCreate] = Field(..., min_length=1)
    table_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    notes: Optional[str] = None


class TableOrderCreate(BaseModel):
    """QR table order request"""
    items: List[OrderItemCreate] = Field(..., min_length=1)
    customer_name: Optional[str] = None
    notes: Optional[str] = None


class PublicOrderCreate(BaseModel):
    """Public link order request"""
    items: List[OrderItemCreate] = Field(..., min_length=1)
    fulfillment_type: FulfillmentType = FulfillmentType.TAKEAWAY
    customer_name: str = Field(..., min_length=1)
    customer_phone: str = Field(..., min_length=6)
    delivery_address: Optional[str] = None
    table_label: Optional[str] = None
    pickup_time: Optional[datetime] = None
    notes: Optional[str] = None


class CounterOrderCreate(BaseModel):
    """Point-of-sale order request"""
    items: List[OrderItemCreate] = Field(..., min_length=1)
    mode: CounterPaymentMode = CounterPaymentMode.PAY_NOW
    payment_method: Optional[PaymentMethod] = None
    customer_name: Optional[str] = None
    notes: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    """Status change request"""
    status: OrderStatus


class MarkPaidRequest(BaseModel):
    """Record the payment of an order"""
    method: PaymentMethod = PaymentMethod.CASH


class OrderItemResponse(BaseModel):
    """Order item in response"""
    id: UUID
    product_id: Optional[UUID]
    product_name: str
    quantity: int
    unit_price: int
    subtotal: int
    notes: Optional[str]

    class Config:
        from_attributes = True


class PaymentResponse(BaseModel):
    """Order payment"""
    id: UUID
    amount: int
    method: str
    status: str
    paid_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Order response"""
    id: UUID
    restaurant_id: UUID
    table_id: Optional[UUID]
    order_number: str
    source: str
    fulfillment_type: Optional[str]
    customer_name: Optional[str]
    customer_phone: Optional[str]
    delivery_address: Optional[str]
    table_label: Optional[str]
    total_amount: int
    status: str
    stock_deducted: bool
    is_archived: bool = False
    notes: Optional[str]
    pickup_time: Optional[datetime]
    items: List[OrderItemResponse]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderDetailResponse(OrderResponse):
    """Order with its payments"""
    payments: List[PaymentResponse]


class OrderListResponse(BaseModel):
    """Paginated order list"""
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int


class OrderTrackingResponse(BaseModel):
    """Public view of an order for the customer"""
    id: UUID
    order_number: str
    status: str
    total_amount: int
    items: List[OrderItemResponse]
    created_at: datetime
    can_cancel: bool


class TransitionsResponse(BaseModel):
    """Statuses an order can move to next"""
    order_id: UUID
    source: str
    status: str
    allowed: List[str]


class PaymentBreakdown(BaseModel):
    """What the customer pays through mobile money or card"""
    operator: str
    subtotal: int
    commission: int
    transaction_fee: int
    total: int
