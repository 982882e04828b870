"""Account and session schemas"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field

from app.models.user import UserRole, RestaurantRole


class Token(BaseModel):
    """JWT token pair"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class RefreshRequest(BaseModel):
    refresh_token: str


class UserCreate(BaseModel):
    """Dashboard account registration"""
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=1)
    phone: Optional[str] = None


class MembershipSummary(BaseModel):
    """A restaurant the account works for, with its role there"""
    restaurant_id: UUID
    restaurant_name: str
    restaurant_slug: str
    role: RestaurantRole


class AccountResponse(BaseModel):
    """Dashboard account"""
    id: UUID
    email: str
    full_name: Optional[str]
    phone: Optional[str]
    role: UserRole
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime]

    class Config:
        from_attributes = True


class CurrentAccountResponse(AccountResponse):
    """Signed-in account with its restaurants"""
    is_super_admin: bool
    memberships: List[MembershipSummary] = []
