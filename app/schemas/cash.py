"""Cash register schemas"""

from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from app.models.cash import CashPaymentMethod, ExpenseCategory


class CashSessionOpen(BaseModel):
    """Open the register for a day"""
    session_date: date
    opening_balance: int = Field(..., ge=0)
    notes: Optional[str] = None


class CashSessionClose(BaseModel):
    """Counted amount at closing"""
    closing_balance: int = Field(..., ge=0)
    notes: Optional[str] = None


class ManualRevenueCreate(BaseModel):
    """Hand-recorded sale"""
    description: str = Field(..., min_length=1)
    quantity: int = Field(1, gt=0)
    unit_amount: int = Field(..., ge=0)
    payment_method: CashPaymentMethod = CashPaymentMethod.CASH
    revenue_type: str = Field("good", pattern="^(good|service)$")
    product_id: Optional[UUID] = None
    notes: Optional[str] = None


class ExpenseCreate(BaseModel):
    """Money paid out of the register"""
    description: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0)
    category: ExpenseCategory = ExpenseCategory.OTHER
    payment_method: CashPaymentMethod = CashPaymentMethod.CASH
    product_id: Optional[UUID] = None
    quantity_added: Optional[int] = Field(None, gt=0)
    notes: Optional[str] = None


class ManualRevenueResponse(BaseModel):
    id: UUID
    description: str
    quantity: int
    unit_amount: int
    total_amount: int
    payment_method: str
    revenue_type: str
    product_id: Optional[UUID]
    stock_movement_id: Optional[UUID]
    notes: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class ExpenseResponse(BaseModel):
    id: UUID
    description: str
    amount: int
    category: str
    payment_method: str
    product_id: Optional[UUID]
    quantity_added: Optional[int]
    stock_movement_id: Optional[UUID]
    notes: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class CashSessionResponse(BaseModel):
    """Register session with its entries"""
    id: UUID
    restaurant_id: UUID
    session_date: date
    status: str
    is_historical: bool
    opening_balance: int
    closing_balance: Optional[int]
    theoretical_balance: Optional[int]
    balance_difference: Optional[int]
    opened_by: Optional[UUID]
    closed_by: Optional[UUID]
    closed_at: Optional[datetime]
    notes: Optional[str]
    created_at: datetime
    revenues: List[ManualRevenueResponse] = []
    expenses: List[ExpenseResponse] = []

    class Config:
        from_attributes = True


class CashSessionSummary(BaseModel):
    """Register session without its entries"""
    id: UUID
    session_date: date
    status: str
    opening_balance: int
    closing_balance: Optional[int]
    balance_difference: Optional[int]

    class Config:
        from_attributes = True


class RevenueBreakdown(BaseModel):
    manual: int
    orders: int
    total: int
    by_method: Dict[str, int]


class ExpenseBreakdown(BaseModel):
    total: int
    by_method: Dict[str, int]
    by_category: Dict[str, int]


class BalanceFigures(BaseModel):
    opening: int
    theoretical: int
    theoretical_cash: int
    actual: Optional[int]
    difference: Optional[int]
    difference_status: str  # ok, minor, major


class SessionBalanceResponse(BaseModel):
    """Register balance from manual revenues, paid orders and expenses"""
    session_id: UUID
    session_date: date
    status: str
    revenues: RevenueBreakdown
    expenses: ExpenseBreakdown
    balance: BalanceFigures
