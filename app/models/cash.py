"""Cash register session models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Date, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum

from app.database import Base


class CashPaymentMethod(str, enum.Enum):
    CASH = "cash"
    AIRTEL_MONEY = "airtel_money"
    MOOV_MONEY = "moov_money"
    CARD = "card"
    OTHER = "other"


class ExpenseCategory(str, enum.Enum):
    STOCK_PURCHASE = "stock_purchase"
    SALARY = "salary"
    UTILITIES = "utilities"
    TRANSPORT = "transport"
    MAINTENANCE = "maintenance"
    MARKETING = "marketing"
    RENT = "rent"
    OTHER = "other"


class CashSession(Base):
    """One business day of the cash register"""
    __tablename__ = "cash_sessions"
    __table_args__ = (
        UniqueConstraint("restaurant_id", "session_date", name="uq_cash_sessions_restaurant_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    session_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="open")  # open, closed
    is_historical = Column(Boolean, default=False)

    opening_balance = Column(Integer, nullable=False, default=0)
    closing_balance = Column(Integer)
    theoretical_balance = Column(Integer)
    balance_difference = Column(Integer)

    opened_by = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    closed_by = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    closed_at = Column(DateTime)
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    revenues = relationship(
        "ManualRevenue",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ManualRevenue.created_at.desc()",
    )
    expenses = relationship(
        "Expense",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="Expense.created_at.desc()",
    )


class ManualRevenue(Base):
    """Sale recorded by hand outside the ordering flows"""
    __tablename__ = "manual_revenues"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    session_id = Column(UUID(as_uuid=True), ForeignKey("cash_sessions.id", ondelete="CASCADE"), nullable=False)
    description = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_amount = Column(Integer, nullable=False)
    total_amount = Column(Integer, nullable=False)
    payment_method = Column(String(20), nullable=False, default="cash")
    revenue_type = Column(String(20), nullable=False, default="good")  # good, service
    product_id = Column(UUID(as_uuid=True), ForeignKey("products.id"))
    stock_movement_id = Column(UUID(as_uuid=True), ForeignKey("stock_movements.id"))
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    session = relationship("CashSession", back_populates="revenues")


class Expense(Base):
    """Money paid out of the register"""
    __tablename__ = "expenses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    session_id = Column(UUID(as_uuid=True), ForeignKey("cash_sessions.id", ondelete="CASCADE"), nullable=False)
    description = Column(String(255), nullable=False)
    amount = Column(Integer, nullable=False)
    category = Column(String(30), nullable=False, default="other")
    payment_method = Column(String(20), nullable=False, default="cash")
    product_id = Column(UUID(as_uuid=True), ForeignKey("products.id"))
    quantity_added = Column(Integer)
    stock_movement_id = Column(UUID(as_uuid=True), ForeignKey("stock_movements.id"))
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    session = relationship("CashSession", back_populates="expenses")
