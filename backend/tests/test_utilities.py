"""Unit tests for content normalization and parsing helpers."""

from datetime import date

import pytest

from mailorder.order_parsing.utilities import (
    clean_html,
    clean_product_name,
    extract_text_content,
    format_amount,
    normalize_currency_symbols,
    normalize_item_name,
    parse_amount,
    parse_date_text,
    prepare_content,
)

# ============================================================================
# HTML CLEANING
# ============================================================================


def test_clean_html_keeps_block_structure_as_lines():
    """Each block element ends up on its own line."""
    html = "<div>Order ID: BB12345678</div><p>Bill Amount: ₹452.00</p>"

    text = clean_html(html)

    assert text.split("\n") == ["Order ID: BB12345678", "Bill Amount: ₹452.00"]


def test_clean_html_drops_scripts_and_styles():
    """Script and style content never reaches the extractors."""
    html = (
        "<html><head><style>.a { color: red; }</style></head>"
        "<body><script>var x = 1;</script><p>Hello</p></body></html>"
    )

    assert clean_html(html) == "Hello"


def test_clean_html_replaces_images_with_alt_text():
    """Image alt text and link text are preserved inline."""
    html = '<p><img src="logo.png" alt="Flipkart"> <a href="https://x.test">Track order</a></p>'

    text = clean_html(html)

    assert "Flipkart" in text
    assert "Track order" in text
    assert "logo.png" not in text


def test_clean_html_empty_input():
    assert clean_html("") == ""
    assert clean_html(None) == ""


def test_extract_text_content_plain_text_decodes_entities():
    """Plain-text bodies are entity-decoded and whitespace-collapsed."""
    text = extract_text_content("Total:   &#8377;499\r\n\r\nThanks")

    assert text == "Total: ₹499\nThanks"


def test_extract_text_content_detects_html():
    assert extract_text_content("<b>Order</b> placed") == "Order placed"


# ============================================================================
# CURRENCY AND AMOUNTS
# ============================================================================


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("&#8377;452", "₹452"),
        ("&#x20b9;452", "₹452"),
        ("Rs. 452", "₹452"),
        ("Rs.452", "₹452"),
        ("INR 452", "₹452"),
        ("₨ 452", "₹ 452"),
    ],
)
def test_normalize_currency_symbols(raw, expected):
    """Entity-encoded and textual rupee spellings become the rupee sign."""
    assert normalize_currency_symbols(raw) == expected


def test_normalize_currency_symbols_leaves_words_alone():
    """'Rs' / 'INR' are only rewritten in front of a number."""
    assert normalize_currency_symbols("Prices in INR only") == "Prices in INR only"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("₹1,299.00", 1299.0),
        ("Rs. 452", 452.0),
        ("999", 999.0),
        ("₹ 12,34,567.50", 1234567.5),
        ("", None),
        ("free", None),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


def test_format_amount():
    assert format_amount(452) == "₹452.00"
    assert format_amount(1299.5) == "₹1299.50"
    assert format_amount(None) is None


# ============================================================================
# DATES
# ============================================================================


@pytest.mark.parametrize(
    "text,expected",
    [
        ("15 January 2024", date(2024, 1, 15)),
        ("15th Jan, 2024", date(2024, 1, 15)),
        ("15-Jan-2024", date(2024, 1, 15)),
        ("January 15, 2024", date(2024, 1, 15)),
        ("2024-01-15", date(2024, 1, 15)),
        ("15/01/2024", date(2024, 1, 15)),
    ],
)
def test_parse_date_text_shapes(text, expected):
    assert parse_date_text(text) == expected


def test_parse_date_text_skips_invalid_dates():
    """An impossible date is skipped in favour of a later valid one."""
    assert parse_date_text("31/02/2024 or 01/03/2024") == date(2024, 3, 1)


def test_parse_date_text_rejects_out_of_range_years():
    assert parse_date_text("15/01/1899") is None
    assert parse_date_text("no date here") is None


# ============================================================================
# CONTENT PREPARATION
# ============================================================================


def test_prepare_content_combines_html_and_text_bodies():
    content = prepare_content("<p>Order ID: 123</p>", "Total Rs. 99", 1000)

    assert content == "Order ID: 123\nTotal ₹99"


def test_prepare_content_truncates():
    content = prepare_content("", "x" * 500, 100)

    assert len(content) == 100


# ============================================================================
# ITEM NAMES
# ============================================================================


def test_normalize_item_name():
    """Dedup key is trimmed, lowercased and whitespace-collapsed."""
    assert normalize_item_name("  Toor   Dal 1KG ") == "toor dal 1kg"
    assert normalize_item_name("") == ""


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("• Amul Butter 500g", "Amul Butter 500g"),
        ("2 x Chicken Biryani", "Chicken Biryani"),
        ('"Boat Airdopes 141"', "Boat Airdopes 141"),
        ("Paneer Tikka -", "Paneer Tikka"),
    ],
)
def test_clean_product_name(raw, expected):
    assert clean_product_name(raw) == expected


def test_clean_product_name_truncates():
    assert len(clean_product_name("A" * 150)) == 100
