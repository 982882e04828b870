"""Restaurant, membership and table schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field

from app.models.user import RestaurantRole


class RestaurantCreate(BaseModel):
    """Create restaurant request"""
    name: str = Field(..., min_length=2, max_length=255)
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None


class RestaurantUpdate(BaseModel):
    """Update restaurant request"""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    primary_color: Optional[str] = None


class RestaurantResponse(BaseModel):
    """Restaurant response"""
    id: UUID
    name: str
    slug: str
    phone: Optional[str]
    email: Optional[str]
    address: Optional[str]
    city: Optional[str]
    logo_url: Optional[str]
    cover_image_url: Optional[str]
    primary_color: Optional[str]
    currency: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MyRestaurantResponse(BaseModel):
    """Restaurant seen from one of its members"""
    restaurant: RestaurantResponse
    role: RestaurantRole


class MemberCreate(BaseModel):
    """Add an existing user to a restaurant"""
    email: EmailStr
    role: RestaurantRole = RestaurantRole.CASHIER


class MemberUpdate(BaseModel):
    """Change a member's role"""
    role: RestaurantRole


class MemberResponse(BaseModel):
    """Restaurant member"""
    user_id: UUID
    email: str
    full_name: Optional[str]
    role: RestaurantRole
    created_at: datetime


class TableCreate(BaseModel):
    """Create table request"""
    number: int = Field(..., ge=1)
    label: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)


class TableUpdate(BaseModel):
    """Update table request"""
    label: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class TableResponse(BaseModel):
    """Table response"""
    id: UUID
    restaurant_id: UUID
    number: int
    label: Optional[str]
    capacity: Optional[int]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TableQRResponse(BaseModel):
    """URL encoded in a table QR code"""
    table_id: UUID
    number: int
    url: str
