"""Stock and warehouse schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field


class StockResponse(BaseModel):
    """Stock of a product"""
    id: UUID
    product_id: UUID
    product_name: str
    quantity: int
    alert_threshold: int
    is_low: bool
    is_available: bool
    updated_at: Optional[datetime]


class StockAdjustment(BaseModel):
    """Manual stock change"""
    type: str = Field(..., pattern="^(manual_in|manual_out|adjustment)$")
    quantity: int = Field(..., ge=0)
    reason: Optional[str] = None


class AlertThresholdUpdate(BaseModel):
    """Low-stock alert threshold"""
    alert_threshold: int


class StockMovementResponse(BaseModel):
    """Stock movement entry"""
    id: UUID
    product_id: UUID
    user_id: Optional[UUID]
    order_id: Optional[UUID]
    type: str
    quantity: int
    previous_qty: int
    new_qty: int
    reason: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class WarehouseProductCreate(BaseModel):
    """Create warehouse product request"""
    name: str = Field(..., min_length=1)
    sku: Optional[str] = None
    category: Optional[str] = None
    storage_unit: str = "unit"
    units_per_storage: int = Field(1, ge=1)
    conversion_ratio: float = Field(1.0, gt=0)
    initial_quantity: float = Field(0, ge=0)
    alert_threshold: float = Field(10, ge=0)
    unit_cost: int = Field(0, ge=0)
    supplier_name: Optional[str] = None
    linked_product_id: Optional[UUID] = None


class WarehouseProductResponse(BaseModel):
    """Warehouse product response"""
    id: UUID
    restaurant_id: UUID
    linked_product_id: Optional[UUID]
    name: str
    sku: Optional[str]
    category: Optional[str]
    storage_unit: str
    units_per_storage: int
    conversion_ratio: float
    quantity: float
    alert_threshold: float
    unit_cost: int
    supplier_name: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WarehouseEntry(BaseModel):
    """Goods received into the warehouse"""
    quantity: float
    unit_cost: Optional[int] = Field(None, ge=0)
    supplier_name: Optional[str] = None
    invoice_number: Optional[str] = None
    notes: Optional[str] = None


class WarehouseTransfer(BaseModel):
    """Move warehouse quantity into sellable stock"""
    warehouse_product_id: UUID
    target_product_id: Optional[UUID] = None
    quantity: float
    notes: Optional[str] = None


class WarehouseAdjustment(BaseModel):
    """Inventory correction of a warehouse product"""
    new_quantity: float
    notes: Optional[str] = None


class WarehouseMovementResponse(BaseModel):
    """Warehouse movement entry"""
    id: UUID
    warehouse_product_id: UUID
    movement_type: str
    quantity: float
    previous_qty: float
    new_qty: float
    destination_product_id: Optional[UUID]
    notes: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class TransferResponse(BaseModel):
    """Outcome of a warehouse transfer"""
    warehouse_product: WarehouseProductResponse
    product_id: UUID
    transferred_quantity: float
    operational_quantity: int
    new_stock_quantity: int


class WarehouseStats(BaseModel):
    """Warehouse summary"""
    total_products: int
    low_stock_count: int
    total_value: int
