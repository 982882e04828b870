"""System log model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class SystemLog(Base):
    """Trail of business events for the back-office"""
    __tablename__ = "system_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"))

    # Actor information
    actor_id = Column(UUID(as_uuid=True))  # User ID or null for system
    actor_type = Column(String(50), default="system")  # user, system, cron

    # Action details
    action = Column(String(100), nullable=False)  # restaurant_created, order_cancelled_auto, etc.
    level = Column(String(20), default="info")  # info, warning, error
    resource_type = Column(String(50))
    resource_id = Column(UUID(as_uuid=True))

    data_json = Column(JSON)

    created_at = Column(DateTime, default=datetime.utcnow)
