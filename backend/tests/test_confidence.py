"""Tests for confidence signals and scoring."""

from mailorder.models import LineItem
from mailorder.order_parsers.base import COURIER_CONFIDENCE, RETAIL_CONFIDENCE, ConfidenceWeights
from mailorder.order_parsers.specialized import GENERIC
from mailorder.order_parsing.confidence import compute_signals, score

REAL_ITEM = LineItem(name="Toor Dal 1kg", total_price=180.0, source="content")
SUBJECT_ITEM = LineItem(name="Boat Airdopes 141", total_price=1299.0, source="subject")
PLACEHOLDER = LineItem(name="Amazon Order 402-1234567-8901234", source="placeholder")
FEE = LineItem(name="Delivery Fee", total_price=25.0, item_type="fee", source="content")


def test_signals_for_complete_extraction():
    signals = compute_signals(
        "BB12345678", 452.0, [REAL_ITEM, FEE], "delivery_notification", "notification",
        {"delivery_slot": "7:00 AM - 9:00 AM"},
    )

    assert signals["order_id"] == 1
    assert signals["amount"] == 1
    assert signals["real_items"] == 1
    assert signals["placeholder_items"] == 0
    assert signals["priced_items"] == 1
    assert signals["email_type"] == 1
    assert signals["metadata"] == 1


def test_subject_and_placeholder_items_are_not_real_items():
    """Only items parsed from the body count as real items."""
    for item in (SUBJECT_ITEM, PLACEHOLDER):
        signals = compute_signals("X1", None, [item], "notification", "notification")

        assert signals["real_items"] == 0
        assert signals["placeholder_items"] == 1


def test_fees_alone_do_not_count_as_items():
    signals = compute_signals("X1", None, [FEE], "notification", "notification")

    assert signals["real_items"] == 0
    assert signals["placeholder_items"] == 0


def test_default_email_type_and_zero_amount_score_nothing():
    signals = compute_signals("X1", 0.0, [], "courier_notification", "courier_notification")

    assert signals["amount"] == 0
    assert signals["email_type"] == 0


def test_courier_detail_signals():
    signals = compute_signals(
        "1234567890123", None, [PLACEHOLDER], "dispatch", "courier_notification",
        {"destination": "Pune", "weight": "1.5 kg"},
    )

    assert signals["destination"] == 1
    assert signals["weight"] == 1
    assert signals["origin"] == 0
    assert score(COURIER_CONFIDENCE, signals) == 0.7


def test_score_is_capped_at_ceiling():
    signals = dict.fromkeys(RETAIL_CONFIDENCE.weights, 1)

    assert score(RETAIL_CONFIDENCE, signals) == 0.95


def test_score_never_negative():
    weights = ConfidenceWeights(base=0.0, ceiling=1.0, weights={"order_id": -0.5})

    assert score(weights, {"order_id": 1}) == 0.0


def test_generic_profile_is_capped_below_known_platforms():
    signals = dict.fromkeys(GENERIC.confidence.weights, 1)

    assert score(GENERIC.confidence, signals) == 0.8


def test_score_is_rounded_to_two_decimals():
    weights = ConfidenceWeights(base=0.1, ceiling=1.0, weights={"order_id": 0.333})

    assert score(weights, {"order_id": 1}) == 0.43
