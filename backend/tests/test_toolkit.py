"""Unit tests for the shared extraction toolkit."""

import pytest

from mailorder.models import LineItem
from mailorder.order_parsers.base import (
    RUPEE_AMOUNT_RULES,
    IdentifierShape,
    labelled_id_rule,
    rule,
    shape_id_rule,
)
from mailorder.order_parsing.toolkit import (
    MAX_MATCHES_PER_RULE,
    AmountCandidate,
    ItemCollector,
    collect_amounts,
    dedupe_items,
    first_match,
    has_unbounded_quantifier,
    is_plausible_amount,
    rank_rules,
    validate_identifier,
    validate_item_name,
    vote_amount,
)

ANY_ID = IdentifierShape(min_length=5, max_length=30)

# ============================================================================
# CASCADE EVALUATION
# ============================================================================


def test_rank_rules_orders_by_priority_and_keeps_table_order_for_ties():
    rules = [rule("low", "a", 10), rule("high_1", "b", 90), rule("high_2", "c", 90)]

    assert [r.name for r in rank_rules(rules)] == ["high_1", "high_2", "low"]


def test_first_match_prefers_higher_priority_rule_over_position():
    """A labelled id later in the body beats an earlier shape-only match."""
    rules = (
        shape_id_rule("shape", r"\d{10}", priority=60),
        labelled_id_rule("label", r"\d{10}", priority=95),
    )
    content = "Call 9876543210 for help\nOrder ID: 1234567890"

    candidate = first_match(rules, "", content, lambda v: validate_identifier(v, ANY_ID))

    assert candidate.value == "1234567890"
    assert candidate.rule == "label"
    assert candidate.source == "content"


def test_first_match_searches_subject_before_content():
    rules = (labelled_id_rule("label", r"\d{8}"),)

    candidate = first_match(rules, "Order 11112222 placed", "Order ID: 33334444", lambda v: True)

    assert candidate.value == "11112222"
    assert candidate.source == "subject"


def test_first_match_skips_values_failing_validation():
    rules = (labelled_id_rule("label", r"[A-Z0-9]{6,12}"),)
    content = "Order ID: 000000\nOrder ID: AB123456"

    candidate = first_match(rules, "", content, lambda v: validate_identifier(v, ANY_ID))

    assert candidate.value == "AB123456"


def test_first_match_returns_none_without_candidates():
    rules = (labelled_id_rule("label", r"\d{8}"),)

    assert first_match(rules, "hello", "world", lambda v: True) is None


def test_match_scan_is_bounded_per_rule():
    """Only the first MAX_MATCHES_PER_RULE matches of a rule are examined."""
    rules = (rule("digits", r"(?P<value>\d{3})"),)
    content = " ".join(["000"] * MAX_MATCHES_PER_RULE + ["123"])

    assert first_match(rules, "", content, lambda v: v != "000") is None


# ============================================================================
# AMOUNT VOTING
# ============================================================================


def test_vote_amount_prefers_priority_over_magnitude():
    candidates = [
        AmountCandidate(amount=5000.0, rule="bare_rupee", priority=50, source="content"),
        AmountCandidate(amount=452.0, rule="amount_paid", priority=100, source="content"),
    ]

    assert vote_amount(candidates).amount == 452.0


def test_vote_amount_breaks_priority_ties_by_magnitude():
    candidates = [
        AmountCandidate(amount=100.0, rule="total", priority=70, source="content"),
        AmountCandidate(amount=250.0, rule="total", priority=70, source="content"),
    ]

    assert vote_amount(candidates).amount == 250.0


def test_vote_amount_empty():
    assert vote_amount([]) is None


def test_collect_amounts_applies_bounds():
    content = "Total: ₹5\nTotal: ₹60,000\nTotal: ₹450"

    candidates = collect_amounts(RUPEE_AMOUNT_RULES, "", content, 10.0, 50000.0)

    assert {c.amount for c in candidates} == {450.0}


def test_collect_amounts_labels_outrank_bare_rupees():
    content = "You saved ₹1,200.00\nAmount Paid: ₹899.00"

    winner = vote_amount(collect_amounts(RUPEE_AMOUNT_RULES, "", content, 0.0, 1000000.0))

    assert winner.amount == 899.0
    assert winner.rule == "amount_paid"


@pytest.mark.parametrize(
    "amount,expected",
    [(None, False), (0, False), (-5, False), (5, False), (10, True), (50000, True), (50001, False)],
)
def test_is_plausible_amount(amount, expected):
    assert is_plausible_amount(amount, 10.0, 50000.0) is expected


# ============================================================================
# VALIDATORS
# ============================================================================


@pytest.mark.parametrize(
    "value,expected",
    [
        ("OD123456789012345678", True),
        ("1234", False),  # too short
        ("ABCDEFGH", False),  # no digit
        ("00000000", False),  # all zeros
        ("width100", False),  # CSS leakage
        ("value12345", False),  # HTML attribute leakage
        ("http12345", False),
        ("10pxborder99", False),
        ("PX12345678", True),  # letters only leak as a whole CSS word
        ("TBLE4471WWX", True),
    ],
)
def test_validate_identifier(value, expected):
    assert validate_identifier(value, ANY_ID) is expected


def test_validate_identifier_allowed_shape_is_case_sensitive():
    shape = IdentifierShape(min_length=8, max_length=20, allowed=r"[A-Z0-9]{8,20}")

    assert validate_identifier("BB12345678", shape)
    assert not validate_identifier("bb12345678", shape)


def test_validate_identifier_exclude_patterns():
    shape = IdentifierShape(min_length=6, max_length=15, exclude=(r"\d{6,8}",))

    assert not validate_identifier("1234567", shape)
    assert validate_identifier("12345678901", shape)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Toor Dal 1kg", True),
        ("Chicken Biryani", True),
        ("Go", False),  # too short
        ("12345", False),  # numeric only
        ("deadbeefcafe", False),  # hex token
        ("background-image", False),  # CSS leakage
        ("Order Total", False),  # reject term
        ("Delivery Fee", False),
    ],
)
def test_validate_item_name(name, expected):
    reject = ("order", "total", "delivery", "fee")

    assert validate_item_name(name, reject) is expected


def test_validate_item_name_rejects_platform_name():
    assert not validate_item_name("BigBasket Special", (), platform_name="BigBasket")


def test_validate_item_name_reject_terms_match_whole_words():
    """'tax' rejects 'Tax' but not 'Taxonomy Book'."""
    assert not validate_item_name("Tax", ("tax",))
    assert validate_item_name("Taxonomy Book", ("tax",))


# ============================================================================
# DEDUPLICATION
# ============================================================================


def test_item_collector_drops_duplicates_by_normalized_name():
    collector = ItemCollector(max_items=10)

    assert collector.add(LineItem(name="Toor Dal 1kg", total_price=180.0))
    assert not collector.add(LineItem(name="  toor  dal 1KG", total_price=90.0))

    assert len(collector) == 1
    assert collector.items[0].total_price == 180.0  # first kept, not merged


def test_item_collector_caps_items():
    collector = ItemCollector(max_items=2)
    for name in ("Apple", "Banana", "Cherry"):
        collector.add(LineItem(name=name))

    assert [item.name for item in collector.items] == ["Apple", "Banana"]
    assert collector.full


def test_dedupe_items():
    items = [LineItem(name="Milk"), LineItem(name="MILK"), LineItem(name="Bread")]

    assert [item.name for item in dedupe_items(items)] == ["Milk", "Bread"]


# ============================================================================
# PATTERN SAFETY
# ============================================================================


@pytest.mark.parametrize(
    "pattern,expected",
    [
        (r"\d{1,12}", False),
        (r"[A-Za-z0-9 +*]{2,80}", False),  # class members are literals
        (r"\+91\d{10}", False),  # escaped plus
        (r"[]*]{1,3}", False),  # leading ] is a literal
        (r"[^]+]{1,3}", False),
        (r"\d+", True),
        (r"a.*b", True),
        (r"\d{3,}", True),
        (r"[a-z]{2}x+", True),
    ],
)
def test_has_unbounded_quantifier(pattern, expected):
    assert has_unbounded_quantifier(pattern) is expected
