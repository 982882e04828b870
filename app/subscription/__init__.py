"""Subscription plans and feature/quota gating"""

from app.subscription.plans import (
    SubscriptionPlan,
    UNLIMITED,
    PLANS,
    calculate_price,
    calculate_savings,
    compare_plans,
    to_subscription_plan,
)
from app.subscription.checker import (
    feature_enabled,
    evaluate_quota,
    compute_quota_status,
    get_restaurant_plan,
    has_feature,
    check_quota,
    get_quota_status,
    get_all_features,
)

__all__ = [
    "SubscriptionPlan",
    "UNLIMITED",
    "PLANS",
    "calculate_price",
    "calculate_savings",
    "compare_plans",
    "to_subscription_plan",
    "feature_enabled",
    "evaluate_quota",
    "compute_quota_status",
    "get_restaurant_plan",
    "has_feature",
    "check_quota",
    "get_quota_status",
    "get_all_features",
]
