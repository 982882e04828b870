"""Menu schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    """Create category request"""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    display_order: int = 0
    is_active: bool = True


class CategoryUpdate(BaseModel):
    """Update category request"""
    name: Optional[str] = None
    description: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class CategoryResponse(BaseModel):
    """Category response"""
    id: UUID
    restaurant_id: UUID
    name: str
    description: Optional[str]
    display_order: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    """Create product request"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: int
    category_id: Optional[UUID] = None
    image_url: Optional[str] = None
    allergens: List[str] = []
    is_available: bool = True
    has_stock: bool = True
    display_order: int = 0


class ProductUpdate(BaseModel):
    """Update product request"""
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[int] = None
    category_id: Optional[UUID] = None
    image_url: Optional[str] = None
    allergens: Optional[List[str]] = None
    is_available: Optional[bool] = None
    has_stock: Optional[bool] = None
    display_order: Optional[int] = None


class ProductResponse(BaseModel):
    """Product response"""
    id: UUID
    restaurant_id: UUID
    category_id: Optional[UUID]
    name: str
    description: Optional[str]
    price: int
    image_url: Optional[str]
    allergens: Optional[List[str]]
    is_available: bool
    has_stock: bool
    display_order: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PublicProduct(BaseModel):
    """Product as shown on the customer menu"""
    id: UUID
    name: str
    description: Optional[str]
    price: int
    image_url: Optional[str]
    allergens: Optional[List[str]]

    class Config:
        from_attributes = True


class PublicCategory(BaseModel):
    """Category with its available products"""
    id: UUID
    name: str
    description: Optional[str]
    products: List[PublicProduct]


class PublicMenuResponse(BaseModel):
    """Customer-facing menu of a restaurant"""
    restaurant_id: UUID
    name: str
    slug: str
    logo_url: Optional[str]
    cover_image_url: Optional[str]
    primary_color: Optional[str]
    currency: str
    categories: List[PublicCategory]
    uncategorized: List[PublicProduct]
