"""
Subscription plans: limits, feature flags and pricing.

Plans are a fixed catalogue. Limits are integers or ``UNLIMITED``; features
are booleans. Both live in the same namespace so a single key lookup answers
either kind of question.
"""

import enum
import math
from typing import Any, Dict, List, Optional, Union

import structlog

logger = structlog.get_logger()

UNLIMITED = "unlimited"

Limit = Union[int, str]


class SubscriptionPlan(str, enum.Enum):
    """Subscription tiers"""
    STARTER = "starter"
    BUSINESS = "business"
    PREMIUM = "premium"


DEFAULT_PLAN = SubscriptionPlan.STARTER

PLAN_ORDER = {
    SubscriptionPlan.STARTER: 1,
    SubscriptionPlan.BUSINESS: 2,
    SubscriptionPlan.PREMIUM: 3,
}

# Months -> discount
BILLING_CYCLE_DISCOUNTS = {
    1: 0.0,
    3: 0.10,
    6: 0.15,
    12: 0.20,
}

LIMIT_KEYS = (
    "max_tables",
    "max_products",
    "max_categories",
    "max_orders_per_day",
    "max_users",
)

FEATURE_KEYS = (
    "kitchen_display",
    "basic_stats",
    "advanced_stats",
    "stock_management",
    "stock_alerts",
    "data_export",
    "mobile_payment",
    "multi_restaurants",
    "custom_branding",
    "priority_support",
    "api_access",
)

PLANS: Dict[SubscriptionPlan, Dict[str, Any]] = {
    SubscriptionPlan.STARTER: {
        "name": "Starter",
        "tagline": "Pour démarrer la digitalisation de votre restaurant",
        "monthly_price": 3000,
        "limits": {
            "max_tables": 10,
            "max_products": 50,
            "max_categories": 10,
            "max_orders_per_day": 100,
            "max_users": 3,
        },
        "features": {
            "kitchen_display": True,
            "basic_stats": True,
            "advanced_stats": False,
            "stock_management": False,
            "stock_alerts": False,
            "data_export": False,
            "mobile_payment": False,
            "multi_restaurants": False,
            "custom_branding": False,
            "priority_support": False,
            "api_access": False,
        },
    },
    SubscriptionPlan.BUSINESS: {
        "name": "Business",
        "tagline": "Pour les restaurants en croissance",
        "monthly_price": 25000,
        "limits": {
            "max_tables": 30,
            "max_products": 200,
            "max_categories": 30,
            "max_orders_per_day": 500,
            "max_users": 6,
        },
        "features": {
            "kitchen_display": True,
            "basic_stats": True,
            "advanced_stats": True,
            "stock_management": True,
            "stock_alerts": True,
            "data_export": True,
            "mobile_payment": False,
            "multi_restaurants": False,
            "custom_branding": False,
            "priority_support": True,
            "api_access": False,
        },
    },
    SubscriptionPlan.PREMIUM: {
        "name": "Premium",
        "tagline": "Pour les établissements exigeants et les groupes",
        "monthly_price": 40000,
        "limits": {
            "max_tables": UNLIMITED,
            "max_products": UNLIMITED,
            "max_categories": UNLIMITED,
            "max_orders_per_day": UNLIMITED,
            "max_users": 999,
        },
        "features": {
            "kitchen_display": True,
            "basic_stats": True,
            "advanced_stats": True,
            "stock_management": True,
            "stock_alerts": True,
            "data_export": True,
            "mobile_payment": True,
            "multi_restaurants": True,
            "custom_branding": True,
            "priority_support": True,
            "api_access": True,
        },
    },
}


def is_valid_plan(value: Optional[str]) -> bool:
    if not value:
        return False
    return value.lower() in [plan.value for plan in SubscriptionPlan]


def to_subscription_plan(value: Optional[str]) -> SubscriptionPlan:
    """Normalize a stored plan name, falling back to starter"""
    if is_valid_plan(value):
        return SubscriptionPlan(value.lower())
    logger.warning("Invalid subscription plan, defaulting to starter", plan=value)
    return DEFAULT_PLAN


def get_plan_config(plan: Union[str, SubscriptionPlan]) -> Dict[str, Any]:
    return PLANS[to_subscription_plan(plan)]


def get_plan_limits(plan: Union[str, SubscriptionPlan]) -> Dict[str, Limit]:
    return dict(get_plan_config(plan)["limits"])


def get_plan_features(plan: Union[str, SubscriptionPlan]) -> Dict[str, bool]:
    return dict(get_plan_config(plan)["features"])


def plan_feature_value(plan: Union[str, SubscriptionPlan], key: str) -> Union[Limit, bool, None]:
    """Look up a limit or a feature flag by key"""
    config = get_plan_config(plan)
    if key in config["limits"]:
        return config["limits"][key]
    return config["features"].get(key)


def is_unlimited(limit: Limit) -> bool:
    return limit == UNLIMITED


def compare_plans(plan_a: Union[str, SubscriptionPlan], plan_b: Union[str, SubscriptionPlan]) -> int:
    """Return -1, 0 or 1 depending on the tier order of the two plans"""
    order_a = PLAN_ORDER[to_subscription_plan(plan_a)]
    order_b = PLAN_ORDER[to_subscription_plan(plan_b)]
    if order_a < order_b:
        return -1
    if order_a > order_b:
        return 1
    return 0


def is_upgrade(current_plan: Union[str, SubscriptionPlan], new_plan: Union[str, SubscriptionPlan]) -> bool:
    return compare_plans(new_plan, current_plan) > 0


def is_downgrade(current_plan: Union[str, SubscriptionPlan], new_plan: Union[str, SubscriptionPlan]) -> bool:
    return compare_plans(new_plan, current_plan) < 0


def is_valid_billing_cycle(months: int) -> bool:
    return months in BILLING_CYCLE_DISCOUNTS


def calculate_price(plan: Union[str, SubscriptionPlan], months: int = 1) -> int:
    """Total price for a billing cycle, discount applied, rounded half up"""
    if not is_valid_billing_cycle(months):
        raise ValueError(f"Unsupported billing cycle: {months}")
    monthly_price = get_plan_config(plan)["monthly_price"]
    discount = BILLING_CYCLE_DISCOUNTS[months]
    return int(math.floor(monthly_price * months * (1 - discount) + 0.5))


def calculate_savings(plan: Union[str, SubscriptionPlan], months: int = 1) -> int:
    monthly_price = get_plan_config(plan)["monthly_price"]
    return monthly_price * months - calculate_price(plan, months)


def format_price(amount: int) -> str:
    """25000 -> '25 000 FCFA'"""
    return f"{amount:,}".replace(",", " ") + " FCFA"


def list_plans() -> List[Dict[str, Any]]:
    """Plan catalogue with prices for every billing cycle"""
    catalogue = []
    for plan, config in PLANS.items():
        catalogue.append({
            "plan": plan.value,
            "name": config["name"],
            "tagline": config["tagline"],
            "monthly_price": config["monthly_price"],
            "limits": dict(config["limits"]),
            "features": dict(config["features"]),
            "prices": {
                str(months): {
                    "total": calculate_price(plan, months),
                    "savings": calculate_savings(plan, months),
                    "discount": BILLING_CYCLE_DISCOUNTS[months],
                }
                for months in BILLING_CYCLE_DISCOUNTS
            },
        })
    return catalogue
