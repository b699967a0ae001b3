"""Tests for the parser registry and rule table validation."""

from dataclasses import replace

import pytest

from mailorder.error_tracking import RuleTableError
from mailorder.models import (
    COURIER_LIFECYCLE,
    ORDER_LIFECYCLE,
    TERMINAL_STATUSES,
    OrderStatus,
    PlatformCategory,
    PlatformId,
)
from mailorder.order_parsers import ALL_PROFILES
from mailorder.order_parsers.base import StatusOverride, rule
from mailorder.order_parsers.ecommerce import AMAZON
from mailorder.order_parsers.logistics import DELHIVERY
from mailorder.order_parsing import registry as registry_module
from mailorder.order_parsing.registry import build_registry


# ============================================================================
# LOOKUPS
# ============================================================================


def test_registry_covers_all_profiles(registry):
    assert len(registry) == len(ALL_PROFILES) == 28


def test_get_extractor_accepts_enum_and_string(registry):
    assert registry.get_extractor(PlatformId.SWIGGY).platform == PlatformId.SWIGGY
    assert registry.get_extractor("Swiggy").platform == PlatformId.SWIGGY


def test_unknown_platform_lookups_do_not_raise(registry):
    assert registry.get_extractor("myspace") is None
    assert registry.get_extractor(None) is None
    assert registry.is_platform_supported(PlatformId.UNKNOWN) is False
    assert registry.platform_category("myspace") is None
    assert "myspace" not in registry


def test_available_platforms_follow_priority_order(registry):
    platforms = registry.available_platforms()

    assert platforms[0] == "amazon"
    assert platforms.index("dominos") < platforms.index("delhivery")
    assert platforms[-1] == "generic"


def test_platform_category(registry):
    assert registry.platform_category("bluedart") == PlatformCategory.LOGISTICS
    assert registry.platform_category(PlatformId.ZEPTO) == PlatformCategory.QUICK_DELIVERY


def test_parser_stats(registry):
    stats = registry.parser_stats()

    assert stats["total_platforms"] == 28
    assert stats["categories"] == {
        "ecommerce": 10,
        "quickdelivery": 5,
        "logistics": 11,
        "specialized": 2,
    }
    assert len(stats["platforms"]) == 28


def test_platforms_by_category_includes_empty_categories():
    registry = build_registry([AMAZON])

    grouped = registry.platforms_by_category()

    assert grouped["ecommerce"] == ["amazon"]
    assert grouped["logistics"] == []


def test_module_level_registry_helpers():
    assert registry_module.is_platform_supported("amazon")
    assert registry_module.get_extractor("flipkart").platform == PlatformId.FLIPKART
    assert "generic" in registry_module.available_platforms()
    assert registry_module.parser_stats()["total_platforms"] == 28


def test_extractor_uses_category_amount_bounds(registry):
    assert (registry.get_extractor("bigbasket").amount_floor, registry.get_extractor("bigbasket").amount_ceiling) == (10.0, 50000.0)
    assert registry.get_extractor("swiggy").amount_ceiling == 10000.0
    assert registry.get_extractor("amazon").amount_ceiling == 1000000.0


# ============================================================================
# RULE TABLE VALIDATION
# ============================================================================


def test_duplicate_platform_is_rejected():
    with pytest.raises(RuleTableError, match="duplicate"):
        build_registry([AMAZON, AMAZON])


def test_profile_without_indicators_is_rejected():
    with pytest.raises(RuleTableError, match=r"\[amazon\] profile has no indicators"):
        build_registry([replace(AMAZON, indicators=())])


def test_profile_without_id_rules_is_rejected():
    with pytest.raises(RuleTableError, match="identifier rules"):
        build_registry([replace(AMAZON, order_id_rules=())])


def test_unknown_amount_category_is_rejected():
    with pytest.raises(RuleTableError, match="amount category"):
        build_registry([replace(AMAZON, amount_category="luxury")])


def test_unknown_tag_cannot_be_registered():
    with pytest.raises(RuleTableError):
        build_registry([replace(AMAZON, platform=PlatformId.UNKNOWN)])


def test_unbounded_quantifier_is_rejected():
    """Every pattern must bound its repetition."""
    greedy = replace(AMAZON, order_id_rules=(rule("greedy", r"order\s+(?P<value>\d+)"),))

    with pytest.raises(RuleTableError, match="unbounded quantifier"):
        build_registry([greedy])


def test_invalid_pattern_fails_at_table_construction():
    with pytest.raises(RuleTableError, match="invalid pattern"):
        rule("broken", r"(?P<value>\d{3}")


def test_shipped_tables_are_valid():
    """Importing the registry validated every shipped table; rebuild to be sure."""
    assert len(build_registry()) == 28


# ============================================================================
# STATUS LIFECYCLES
# ============================================================================


@pytest.mark.parametrize("profile", ALL_PROFILES, ids=lambda profile: profile.platform.value)
def test_status_maps_stay_in_their_lifecycle(profile):
    if profile.is_courier:
        lifecycle = set(COURIER_LIFECYCLE) | {OrderStatus.EXCEPTION}
    else:
        lifecycle = set(ORDER_LIFECYCLE) | TERMINAL_STATUSES

    assert set(profile.status_map.values()) <= lifecycle
    assert {override.status for override in profile.status_overrides} <= lifecycle


def test_courier_status_in_order_table_is_rejected():
    mixed = replace(AMAZON, status_map={"order_confirmation": OrderStatus.IN_TRANSIT})

    with pytest.raises(RuleTableError, match="outside the order lifecycle: in_transit"):
        build_registry([mixed])


def test_order_status_in_courier_override_is_rejected():
    mixed = replace(
        DELHIVERY,
        status_overrides=(StatusOverride(("cancelled",), OrderStatus.CANCELLED),),
    )

    with pytest.raises(RuleTableError, match="outside the courier lifecycle: cancelled"):
        build_registry([mixed])
