"""
Tests for feature resolution, headcount quotas and upgrade suggestions.
"""

import pytest

from entitlements.features import (
    compare_plans,
    employee_limit_text,
    enabled_features,
    feature_value,
    format_price,
    has_feature,
    is_at_employee_limit,
    is_enabled_value,
    remaining_slots,
    suggest_upgrade,
)
from entitlements.plans import UNLIMITED, Feature, Tier, plan_of

TIERS = [Tier.STARTER, Tier.PROFESSIONAL, Tier.ENTERPRISE]
ADJACENT = list(zip(TIERS, TIERS[1:]))


class TestHasFeature:
    def test_multi_branch_by_tier(self):
        assert has_feature(Tier.ENTERPRISE, "multiBranch") is True
        assert has_feature(Tier.STARTER, "multiBranch") is False

    @pytest.mark.parametrize("lower,higher", ADJACENT)
    def test_higher_tier_keeps_every_lower_feature(self, lower, higher):
        for feature in Feature:
            if has_feature(lower, feature):
                assert has_feature(higher, feature), (lower, higher, feature)

    def test_enabled_count_never_decreases(self):
        counts = [len(enabled_features(tier)) for tier in TIERS]
        assert counts == sorted(counts)

    def test_unlimited_quota_counts_as_present(self):
        assert feature_value(Tier.ENTERPRISE, Feature.MAX_EMPLOYEES) == UNLIMITED
        assert has_feature(Tier.ENTERPRISE, "max_employees") is True

    def test_string_values_count_as_present(self):
        assert has_feature(Tier.STARTER, "support_response_time")
        assert has_feature(Tier.STARTER, Feature.SUPPORT_LEVEL)

    def test_unknown_inputs_are_denied(self):
        assert has_feature(None, "employee_profiles") is False
        assert has_feature("platinum", "employee_profiles") is False
        assert has_feature(Tier.ENTERPRISE, "time_travel") is False
        assert feature_value(Tier.ENTERPRISE, "time_travel") is None
        assert enabled_features(None) == ()

    @pytest.mark.parametrize("value,expected", [
        (True, True), (False, False), (0, False), (10, True), (-1, True),
        ("4 hours", True), ("", True), (None, False), (1.5, False),
    ])
    def test_truthiness_rule(self, value, expected):
        assert is_enabled_value(value) is expected


class TestEnabledFeatures:
    @pytest.mark.parametrize("tier", TIERS)
    def test_matches_truthy_matrix_keys(self, tier):
        expected = set()
        for name, value in plan_of(tier).features.items():
            if isinstance(value, bool):
                present = value
            elif isinstance(value, int):
                present = value != 0
            else:
                present = isinstance(value, str)
            if present:
                expected.add(name)
        assert set(enabled_features(tier)) == expected

    def test_definition_order(self):
        names = enabled_features(Tier.STARTER)
        order = list(Feature.values)
        assert list(names) == sorted(names, key=order.index)


class TestEmployeeQuota:
    def test_starter_quota_scenarios(self):
        assert is_at_employee_limit(Tier.STARTER, 10) is True
        assert is_at_employee_limit(Tier.STARTER, 9) is False
        assert remaining_slots(Tier.STARTER, 9) == 1

    def test_unlimited_is_never_at_limit(self):
        for count in (0, 1, 50, 10_000, 10**9):
            assert is_at_employee_limit(Tier.ENTERPRISE, count) is False
            assert remaining_slots(Tier.ENTERPRISE, count) == UNLIMITED

    @pytest.mark.parametrize("tier", TIERS + [None])
    def test_remaining_slots_never_negative(self, tier):
        for count in (0, 5, 10, 49, 50, 51, 500):
            slots = remaining_slots(tier, count)
            assert slots >= 0 or slots == UNLIMITED

    def test_over_quota_clamps_to_zero(self):
        assert remaining_slots(Tier.PROFESSIONAL, 75) == 0
        assert is_at_employee_limit(Tier.PROFESSIONAL, 75)

    def test_no_plan_is_always_at_limit(self):
        assert is_at_employee_limit(None, 0) is True
        assert remaining_slots(None, 0) == 0


class TestUpgrades:
    def test_upgrade_chain_from_starter_has_two_steps(self):
        steps = []
        tier = suggest_upgrade(Tier.STARTER)
        while tier is not None:
            steps.append(tier)
            tier = suggest_upgrade(tier)
        assert steps == [Tier.PROFESSIONAL, Tier.ENTERPRISE]

    def test_no_upgrade_for_unknown_tier(self):
        assert suggest_upgrade("unknown") is None

    def test_compare_plans(self):
        diff = {row["feature"]: row for row in compare_plans(Tier.STARTER, Tier.ENTERPRISE)}
        assert diff["multi_branch"] == {"feature": "multi_branch", "plan1": False, "plan2": True}
        assert diff["max_employees"]["plan2"] == UNLIMITED
        assert "employee_profiles" not in diff
        assert compare_plans(Tier.STARTER, "bogus") == []


class TestFormatting:
    def test_format_price(self):
        assert format_price(1399) == "₱1,399"
        assert format_price(15588) == "₱15,588"
        assert format_price(0) == "₱0"

    def test_employee_limit_text(self):
        assert employee_limit_text(10) == "Up to 10 employees"
        assert employee_limit_text(UNLIMITED) == "Unlimited employees"
