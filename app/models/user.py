"""User and restaurant membership models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum

from app.config import settings
from app.database import Base


class UserRole(str, enum.Enum):
    """Platform-wide roles"""
    SUPER_ADMIN = "super_admin"
    MEMBER = "member"


class RestaurantRole(str, enum.Enum):
    """Roles inside a restaurant"""
    KITCHEN = "kitchen"
    CASHIER = "cashier"
    MANAGER = "manager"
    ADMIN = "admin"


ROLE_HIERARCHY = {
    RestaurantRole.KITCHEN: 1,
    RestaurantRole.CASHIER: 2,
    RestaurantRole.MANAGER: 3,
    RestaurantRole.ADMIN: 4,
}


class User(Base):
    """Dashboard users"""
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Authentication
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    # Profile
    full_name = Column(String(255))
    phone = Column(String(20))

    # Role
    role = Column(Enum(UserRole), default=UserRole.MEMBER)

    # Status
    is_active = Column(Boolean, default=True)

    # Tokens
    refresh_token = Column(String(500))

    # Timestamps
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    memberships = relationship("RestaurantUser", back_populates="user")

    @property
    def is_super_admin(self) -> bool:
        if self.role == UserRole.SUPER_ADMIN:
            return True
        return (self.email or "").lower() in settings.superadmin_emails_list


class RestaurantUser(Base):
    """Membership of a user in a restaurant with a role"""
    __tablename__ = "restaurant_users"
    __table_args__ = (
        UniqueConstraint("user_id", "restaurant_id", name="uq_restaurant_users_user_restaurant"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    role = Column(Enum(RestaurantRole), default=RestaurantRole.CASHIER, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="memberships")
    restaurant = relationship("Restaurant", back_populates="members")

    def has_permission(self, required_role: RestaurantRole) -> bool:
        """Check if member has at least the required role level"""
        return ROLE_HIERARCHY.get(self.role, 0) >= ROLE_HIERARCHY.get(required_role, 0)
