"""Order, order item and payment models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum

from app.database import Base


class OrderStatus(str, enum.Enum):
    """Order lifecycle"""
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderSource(str, enum.Enum):
    """Channel an order was placed through"""
    QR_TABLE = "qr_table"
    PUBLIC_LINK = "public_link"
    DASHBOARD = "dashboard"
    COUNTER = "counter"


class FulfillmentType(str, enum.Enum):
    """How a public link order reaches the customer"""
    TABLE = "table"
    TAKEAWAY = "takeaway"
    DELIVERY = "delivery"
    RESERVATION = "reservation"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    AIRTEL_MONEY = "airtel_money"
    MOOV_MONEY = "moov_money"
    CARD = "card"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class CounterPaymentMode(str, enum.Enum):
    """Point-of-sale payment timing"""
    PAY_NOW = "pay_now"
    PAY_LATER = "pay_later"


class Order(Base):
    """Customer orders from every channel"""
    __tablename__ = "orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    table_id = Column(UUID(as_uuid=True), ForeignKey("tables.id"))
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"))

    order_number = Column(String(50), nullable=False)
    source = Column(String(20), nullable=False, default="qr_table")  # qr_table, public_link, dashboard, counter
    fulfillment_type = Column(String(20))  # table, takeaway, delivery, reservation

    # Customer information
    customer_name = Column(String(255))
    customer_phone = Column(String(20))
    delivery_address = Column(Text)
    table_label = Column(String(100))

    # Pricing
    total_amount = Column(Integer, nullable=False, default=0)

    # Status
    status = Column(String(20), nullable=False, default="pending")  # pending, preparing, ready, delivered, cancelled
    stock_deducted = Column(Boolean, default=False)
    is_archived = Column(Boolean, default=False, nullable=False)

    notes = Column(Text)
    pickup_time = Column(DateTime)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="order")
    table = relationship("Table")


class OrderItem(Base):
    """Order line with the product name and price frozen at order time"""
    __tablename__ = "order_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False)
    product_id = Column(UUID(as_uuid=True), ForeignKey("products.id"))
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Integer, nullable=False)
    notes = Column(Text)

    # Relationships
    order = relationship("Order", back_populates="items")

    @property
    def subtotal(self) -> int:
        return self.unit_price * self.quantity


class Payment(Base):
    """Payment attached to an order"""
    __tablename__ = "payments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    amount = Column(Integer, nullable=False)
    method = Column(String(20), nullable=False, default="cash")  # cash, airtel_money, moov_money, card
    status = Column(String(20), nullable=False, default="pending")  # pending, paid, failed, refunded
    timing = Column(String(20))  # before_meal, after_meal
    transaction_id = Column(String(255))
    error_message = Column(Text)
    paid_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    order = relationship("Order", back_populates="payments")
