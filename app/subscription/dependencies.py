"""FastAPI dependencies gating routes on plan features and quotas"""

from typing import Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import get_current_active_user, verify_restaurant_access
from app.database import get_db
from app.models.user import User, RestaurantRole
from app.subscription.checker import ensure_feature, ensure_quota


def require_feature(feature: str, required_role: Optional[RestaurantRole] = None):
    """Dependency factory: member access, then the plan must include the feature"""
    async def feature_checker(
        restaurant_id: UUID,
        current_user: User = Depends(get_current_active_user),
        db: AsyncSession = Depends(get_db),
    ) -> User:
        await verify_restaurant_access(db, restaurant_id, current_user, required_role)
        await ensure_feature(db, restaurant_id, feature)
        return current_user
    return feature_checker


def enforce_quota(quota: str, required_role: Optional[RestaurantRole] = None):
    """Dependency factory: member access, then the quota must have room left"""
    async def quota_checker(
        restaurant_id: UUID,
        current_user: User = Depends(get_current_active_user),
        db: AsyncSession = Depends(get_db),
    ) -> User:
        await verify_restaurant_access(db, restaurant_id, current_user, required_role)
        await ensure_quota(db, restaurant_id, quota)
        return current_user
    return quota_checker
