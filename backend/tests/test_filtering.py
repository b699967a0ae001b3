"""Tests for the per-platform canHandle gate."""

import pytest

from mailorder.order_parsers.ecommerce import AMAZON, FLIPKART, MEESHO, MYNTRA, SNAPDEAL
from mailorder.order_parsers.logistics import DELHIVERY
from mailorder.order_parsers.quick_delivery import BIGBASKET
from mailorder.order_parsers.specialized import GENERIC
from mailorder.order_parsing.filtering import (
    can_handle,
    check_can_handle,
    find_promotional_keyword,
    is_marketing_sender,
    strip_product_segments,
)


def test_accepts_transactional_email(make_email):
    email = make_email(sender="auto-confirm@amazon.in", subject="Your Amazon.in order has been placed")

    accepted, reason = check_can_handle(AMAZON, email)

    assert accepted is True
    assert "Amazon" in reason


def test_rejects_promotional_subject_from_known_domain(make_email):
    """A sender match alone is not sufficient."""
    email = make_email(sender="updates@myntra.com", subject="50% off sale - explore now")

    accepted, reason = check_can_handle(MYNTRA, email)

    assert accepted is False


def test_rejects_promotional_subject_even_with_order_keyword(make_email):
    email = make_email(sender="updates@myntra.com", subject="Order now - flat 40% off on sneakers")

    accepted, reason = check_can_handle(MYNTRA, email)

    assert accepted is False
    assert reason.startswith("Promotional subject")


def test_rejects_subject_without_order_keyword(make_email):
    email = make_email(sender="updates@myntra.com", subject="Meet the new collection")

    assert can_handle(MYNTRA, email) is False


def test_rejects_unrelated_sender(make_email):
    email = make_email(sender="someone@example.com", subject="Your Amazon.in order has been placed")

    accepted, reason = check_can_handle(AMAZON, email)

    assert accepted is False
    assert "Sender not recognised" in reason


@pytest.mark.parametrize("sender", ["deals@amazon.in", "newsletter@myntra.com", "store-news@amazon.in"])
def test_rejects_marketing_senders(make_email, sender):
    email = make_email(sender=sender, subject="Your order has been placed")

    assert can_handle(AMAZON, email) is False
    assert can_handle(MYNTRA, email) is False


def test_promotional_keywords_match_whole_words_only():
    """'Snapdeal' does not trip the 'deal' keyword."""
    assert find_promotional_keyword("Your Snapdeal order is confirmed", ("deal",)) is None
    assert find_promotional_keyword("Big deals this weekend", ("deal",)) == "deal"
    assert find_promotional_keyword("Flat 10 % OFF", ()) == "% off"


def test_snapdeal_order_email_is_accepted(make_email):
    email = make_email(sender="noreply@snapdeal.com", subject="Your Snapdeal order is confirmed")

    assert can_handle(SNAPDEAL, email) is True


def test_courier_profiles_use_courier_keywords(make_email):
    email = make_email(sender="noreply@delhivery.com", subject="Your shipment is out for delivery")

    assert can_handle(DELHIVERY, email) is True


def test_generic_profile_checks_keywords_in_sender_and_subject(make_email):
    """Without a sender allow-list the keyword may come from the sender."""
    email = make_email(sender="invoice@shop.example", subject="Ref AB12345678")
    no_keyword = make_email(sender="hello-team@shop.example", subject="Ref AB12345678")

    assert can_handle(GENERIC, email) is True
    assert can_handle(GENERIC, no_keyword) is False


def test_is_marketing_sender():
    assert is_marketing_sender("Offers <offers@flipkart.com>") == "offers@"
    assert is_marketing_sender("noreply@flipkart.com") is None


# ============================================================================
# PRODUCT NAMES AND FEEDBACK SUBJECTS
# ============================================================================


@pytest.mark.parametrize(
    "profile,sender,subject",
    [
        (AMAZON, "auto-confirm@amazon.in", 'Your Amazon.in order of "SanDisk Ultra Flash Drive 64GB" has been placed'),
        (AMAZON, "auto-confirm@amazon.in", 'Your Amazon.in order of "Deal Maker Board Game" has been placed'),
        (FLIPKART, "noreply@flipkart.com", "Your order for Coupon Organizer Wallet has been placed"),
    ],
)
def test_product_names_do_not_read_as_promotional(make_email, profile, sender, subject):
    email = make_email(sender=sender, subject=subject)

    accepted, reason = check_can_handle(profile, email)

    assert accepted is True, reason


def test_strip_product_segments():
    assert "Cart Trolley" not in strip_product_segments('Your order of "Cart Trolley" has been shipped')
    assert "Sale Tee" not in strip_product_segments("Your order for Sale Tee has been placed")
    assert strip_product_segments("Big sale on your next order") == "Big sale on your next order"


@pytest.mark.parametrize(
    "subject",
    [
        "Rate your BigBasket order BB12345678 - share feedback",
        "Review your recent order BB12345678",
        "Items left in your cart - complete your order",
    ],
)
def test_rejects_feedback_and_cart_subjects(make_email, subject):
    email = make_email(sender="noreply@bigbasket.com", subject=subject)

    accepted, reason = check_can_handle(BIGBASKET, email)

    assert accepted is False
    assert reason.startswith("Promotional subject")


def test_meesho_rejects_catalog_subjects(make_email):
    email = make_email(sender="noreply@meesho.com", subject="New catalog picked for your next order")

    assert can_handle(MEESHO, email) is False
    assert can_handle(AMAZON, make_email(sender="auto-confirm@amazon.in", subject="New catalog picked for your next order")) is True
