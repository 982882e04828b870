"""Subscription schemas"""

from datetime import datetime
from typing import Optional, Dict, List, Union
from uuid import UUID
from pydantic import BaseModel, Field


class QuotaCheck(BaseModel):
    """Result of a quota check before creating a resource"""
    allowed: bool
    current_usage: int
    limit: Union[int, str]
    reason: Optional[str] = None


class QuotaStatus(BaseModel):
    """Usage of a quota for display"""
    used: int
    limit: Union[int, str]
    percentage: float
    is_near_limit: bool
    is_at_limit: bool


class FeaturesResponse(BaseModel):
    """Plan, feature flags and quota usage of a restaurant"""
    plan: str
    features: Dict[str, bool]
    quotas: Dict[str, QuotaStatus]


class SubscriptionResponse(BaseModel):
    """Subscription response"""
    id: UUID
    restaurant_id: UUID
    plan: str
    status: str
    billing_cycle: Optional[int]
    base_price: Optional[int]
    trial_starts_at: Optional[datetime]
    trial_ends_at: Optional[datetime]
    current_period_start: Optional[datetime]
    current_period_end: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class SubscriptionPaymentCreate(BaseModel):
    """Manual subscription payment request"""
    plan: str
    billing_cycle: int = 1
    user_count: int = Field(1, ge=1)
    proof_url: Optional[str] = None
    notes: Optional[str] = None


class SubscriptionPaymentResponse(BaseModel):
    """Subscription payment response"""
    id: UUID
    subscription_id: UUID
    restaurant_id: UUID
    plan: str
    billing_cycle: int
    user_count: Optional[int]
    amount: int
    method: Optional[str]
    status: str
    proof_url: Optional[str]
    notes: Optional[str]
    error_message: Optional[str]
    expires_at: Optional[datetime]
    validated_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class SubscriptionOverview(BaseModel):
    """Subscription with its payment history"""
    subscription: Optional[SubscriptionResponse]
    payments: List[SubscriptionPaymentResponse]
    days_remaining: int
