"""
Feature resolution over the plan catalog.

Truthiness rule used by has_feature / enabled_features:
    bool         -> as-is
    int          -> True iff non-zero, so the -1 "unlimited" quota counts as present
    str / enum   -> True; the value is a level of service, not an on/off switch
    None         -> False (only found in the deny-all matrix)
"""

from decimal import Decimal

from .plans import UNLIMITED, Tier, coerce_feature, coerce_tier, plan_of

UPGRADE_PATH = {
    Tier.STARTER: Tier.PROFESSIONAL,
    Tier.PROFESSIONAL: Tier.ENTERPRISE,
    Tier.ENTERPRISE: None,
}


def is_enabled_value(value) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return True
    return False


def feature_value(tier, feature_key):
    """Raw matrix value for a feature, or None for unknown tiers/keys."""
    feature = coerce_feature(feature_key)
    if feature is None or coerce_tier(tier) is None:
        return None
    return plan_of(tier).features.value_of(feature)


def has_feature(tier, feature_key) -> bool:
    feature = coerce_feature(feature_key)
    if feature is None:
        return False
    return is_enabled_value(plan_of(tier).features.value_of(feature))


def enabled_features(tier):
    """Enabled feature names in matrix definition order."""
    return tuple(
        name for name, value in plan_of(tier).features.items()
        if is_enabled_value(value)
    )


def employee_limit(tier) -> int:
    return plan_of(tier).employee_limit


def is_at_employee_limit(tier, current_count) -> bool:
    limit = employee_limit(tier)
    if limit == UNLIMITED:
        return False
    return current_count >= limit


def remaining_slots(tier, current_count) -> int:
    """Free headcount, or -1 when the tier is unlimited."""
    limit = employee_limit(tier)
    if limit == UNLIMITED:
        return UNLIMITED
    return max(0, limit - current_count)


def suggest_upgrade(tier):
    """Next tier up, or None at the top (and for unknown tiers)."""
    tier = coerce_tier(tier)
    if tier is None:
        return None
    return UPGRADE_PATH[tier]


def compare_plans(first, second):
    """Features whose values differ between two tiers."""
    first, second = coerce_tier(first), coerce_tier(second)
    if first is None or second is None:
        return []
    left = plan_of(first).features.items()
    right = plan_of(second).features.as_dict()
    return [
        {"feature": name, "plan1": value, "plan2": right[name]}
        for name, value in left
        if value != right[name]
    ]


def employee_limit_text(limit) -> str:
    if limit == UNLIMITED:
        return "Unlimited employees"
    return f"Up to {limit} employees"


def format_price(amount) -> str:
    """Peso amount with thousands separators and no decimals, e.g. "₱1,399"."""
    rounded = Decimal(amount).quantize(Decimal("1"))
    return f"₱{rounded:,}"
