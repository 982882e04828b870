"""Subscription and subscription payment models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class Subscription(Base):
    """Plan subscription of a restaurant"""
    __tablename__ = "subscriptions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), unique=True, nullable=False)
    plan = Column(String(20), nullable=False, default="starter")  # starter, business, premium
    status = Column(String(20), nullable=False, default="trial")  # trial, active, expired, cancelled
    billing_cycle = Column(Integer, default=1)  # Months
    base_price = Column(Integer, default=0)
    active_users_count = Column(Integer, default=1)

    trial_starts_at = Column(DateTime)
    trial_ends_at = Column(DateTime)
    current_period_start = Column(DateTime)
    current_period_end = Column(DateTime)
    cancelled_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="subscription")
    payments = relationship("SubscriptionPayment", back_populates="subscription")

    @property
    def period_end(self):
        """End of the currently paid or trial period"""
        if self.status == "trial":
            return self.trial_ends_at
        return self.current_period_end


class SubscriptionPayment(Base):
    """Payment for a plan, validated manually or by the payment provider"""
    __tablename__ = "subscription_payments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subscription_id = Column(UUID(as_uuid=True), ForeignKey("subscriptions.id"), nullable=False)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    plan = Column(String(20), nullable=False)
    billing_cycle = Column(Integer, nullable=False, default=1)
    user_count = Column(Integer, default=1)
    amount = Column(Integer, nullable=False)
    method = Column(String(20), default="manual")  # manual, ebilling
    status = Column(String(20), nullable=False, default="pending")  # pending, confirmed, failed, expired
    proof_url = Column(String(500))
    notes = Column(Text)
    error_message = Column(Text)
    expires_at = Column(DateTime)
    validated_at = Column(DateTime)
    validated_by = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    subscription = relationship("Subscription", back_populates="payments")
