"""Operational stock and warehouse models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class Stock(Base):
    """Sellable quantity of a product"""
    __tablename__ = "stocks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    product_id = Column(UUID(as_uuid=True), ForeignKey("products.id"), unique=True, nullable=False)
    quantity = Column(Integer, default=0, nullable=False)
    alert_threshold = Column(Integer, default=5)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    product = relationship("Product", back_populates="stock")

    @property
    def is_low(self) -> bool:
        return self.quantity <= (self.alert_threshold or 0)


class StockMovement(Base):
    """Stock movement journal"""
    __tablename__ = "stock_movements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    product_id = Column(UUID(as_uuid=True), ForeignKey("products.id"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"))
    type = Column(String(50), nullable=False)  # manual_in, manual_out, adjustment, order, transfer, sale_manual, purchase
    quantity = Column(Integer, nullable=False)  # Signed delta
    previous_qty = Column(Integer, nullable=False)
    new_qty = Column(Integer, nullable=False)
    reason = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)


class WarehouseProduct(Base):
    """Bulk item kept in the warehouse (crates, sacks, cartons)"""
    __tablename__ = "warehouse_products"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    linked_product_id = Column(UUID(as_uuid=True), ForeignKey("products.id"))
    name = Column(String(255), nullable=False)
    sku = Column(String(100))
    category = Column(String(100))
    storage_unit = Column(String(50), default="unit")
    units_per_storage = Column(Integer, default=1)
    conversion_ratio = Column(Float, default=1.0)  # Operational units per storage unit
    quantity = Column(Float, default=0, nullable=False)
    alert_threshold = Column(Float, default=10)
    unit_cost = Column(Integer, default=0)
    supplier_name = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class WarehouseMovement(Base):
    """Warehouse movement journal"""
    __tablename__ = "warehouse_movements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    warehouse_product_id = Column(UUID(as_uuid=True), ForeignKey("warehouse_products.id"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    movement_type = Column(String(50), nullable=False)  # entry, transfer_to_ops, adjustment
    quantity = Column(Float, nullable=False)
    previous_qty = Column(Float, nullable=False)
    new_qty = Column(Float, nullable=False)
    unit_cost = Column(Integer)
    supplier_name = Column(String(255))
    invoice_number = Column(String(100))
    destination_product_id = Column(UUID(as_uuid=True), ForeignKey("products.id"))
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
