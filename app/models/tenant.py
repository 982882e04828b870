"""Restaurant (tenant) models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class Restaurant(Base):
    """Restaurant tenant"""
    __tablename__ = "restaurants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False)

    # Contact
    phone = Column(String(20))
    email = Column(String(255))
    address = Column(Text)
    city = Column(String(100))

    # Branding
    logo_url = Column(String(500))
    cover_image_url = Column(String(500))
    primary_color = Column(String(20))
    currency = Column(String(10), default="XAF")

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    members = relationship("RestaurantUser", back_populates="restaurant")
    tables = relationship("Table", back_populates="restaurant")
    subscription = relationship("Subscription", back_populates="restaurant", uselist=False)


class Table(Base):
    """Dining table with its own QR code"""
    __tablename__ = "tables"
    __table_args__ = (
        UniqueConstraint("restaurant_id", "number", name="uq_tables_restaurant_number"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    number = Column(Integer, nullable=False)
    label = Column(String(100))
    capacity = Column(Integer)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="tables")
