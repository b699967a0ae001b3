"""
Quick Delivery Rule Tables

Swiggy (incl. Instamart), Blinkit, BigBasket, Zepto, Domino's
"""

from mailorder.models import OrderStatus, PlatformCategory, PlatformId

from .base import (
    FEE_PATTERN,
    FOOD_DETAIL_RULES,
    GROCERY_DETAIL_RULES,
    ITEM_REJECT_TERMS,
    ITEM_NAME,
    ITEM_PRICE,
    ORDER_KEYWORDS,
    RETAIL_ITEM_PATTERNS,
    RETAIL_STATUS_MAP,
    RETAIL_TYPE_LABELS,
    SUBJECT_ITEM_RULES,
    ConfidenceWeights,
    EmailTypeRule,
    IdentifierShape,
    ItemPattern,
    PlatformProfile,
    StatusOverride,
    amount_rule,
    frozen_map,
    labelled_id_rule,
    rule,
    shape_id_rule,
)


QUICK_DELIVERY = PlatformCategory.QUICK_DELIVERY

FOOD_EMAIL_TYPES = (
    EmailTypeRule("cancellation", ("cancelled", "canceled", "cancellation")),
    EmailTypeRule("out_for_delivery_notification", ("out for delivery", "on the way", "picked up", "arriving")),
    EmailTypeRule("delivery_notification", ("delivered",), ("has been delivered", "was delivered")),
    EmailTypeRule("order_confirmation", ("confirmed", "placed", "received", "order summary", "your order", "instamart")),
)

FOOD_STATUS_MAP = frozen_map({
    "cancellation": OrderStatus.CANCELLED,
    "out_for_delivery_notification": OrderStatus.OUT_FOR_DELIVERY,
    "delivery_notification": OrderStatus.DELIVERED,
    "order_confirmation": OrderStatus.CONFIRMED,
    "notification": OrderStatus.CONFIRMED,
})

FOOD_TYPE_LABELS = frozen_map({
    "order_confirmation": "Food Order",
    "out_for_delivery_notification": "Food Order On the Way",
    "delivery_notification": "Delivered Food Order",
    "cancellation": "Cancelled Food Order",
})

GROCERY_TYPE_LABELS = frozen_map({
    **RETAIL_TYPE_LABELS,
    "order_confirmation": "Grocery Order",
    "shipping_notification": "Grocery Order Dispatched",
    "delivery_notification": "Delivered Grocery Order",
    "tracking_update": "Grocery Order Update",
})

# Food lines rarely carry a separator between name and price
FOOD_ITEM_PATTERNS = (
    ItemPattern(
        "food_qty_name_price",
        rf"^\s{{0,3}}(?P<qty>\d{{1,2}})\s{{0,2}}[x×]\s{{1,3}}(?P<name>{ITEM_NAME})\s{{0,3}}[\-–:|]?\s{{0,3}}{ITEM_PRICE}",
    ),
    ItemPattern(
        "food_name_qty_price",
        rf"^(?P<name>{ITEM_NAME})\s{{1,3}}(?:x|×)\s{{0,2}}(?P<qty>\d{{1,2}})\s{{0,3}}[\-–:|]?\s{{0,3}}{ITEM_PRICE}",
    ),
)

FOOD_ITEM_REJECT_TERMS = ITEM_REJECT_TERMS + (
    "bill", "summary", "grand", "final", "handling", "convenience", "service",
    "platform", "packaging", "restaurant", "tip",
)

QUICK_CONFIDENCE = ConfidenceWeights(
    base=0.0,
    ceiling=0.95,
    weights={
        "order_id": 0.35,
        "amount": 0.25,
        "real_items": 0.25,
        "placeholder_items": 0.15,
        "email_type": 0.1,
        "metadata": 0.05,
    },
)

SWIGGY_CONFIDENCE = ConfidenceWeights(
    base=0.0,
    ceiling=0.95,
    weights={
        "order_id": 0.4,
        "amount": 0.3,
        "real_items": 0.2,
        "placeholder_items": 0.1,
        "priced_items": 0.1,
    },
)


SWIGGY = PlatformProfile(
    platform=PlatformId.SWIGGY,
    display_name="Swiggy",
    category=QUICK_DELIVERY,
    amount_category="food",
    indicators=("swiggy.in", "@swiggy", "instamart"),
    sender_domains=("swiggy.in", "swiggy.com"),
    order_keywords=("order", "delivered", "confirmed", "instamart", "on the way", "cancelled"),
    order_id_rules=(
        labelled_id_rule("swiggy_order_label", r"\d{12,18}", priority=95),
        shape_id_rule("swiggy_order_shape", r"\d{12,18}", priority=60),
    ),
    id_shape=IdentifierShape(min_length=12, max_length=18, allowed=r"\d{12,18}"),
    amount_rules=(
        amount_rule("grand_total", r"grand\s{0,2}total", 100),
        amount_rule("paid_via", r"paid\s{1,3}via\s{1,3}[A-Za-z ]{2,20}|amount\s{1,3}paid", 95),
        amount_rule("final_amount", r"final\s{1,3}amount|bill\s{1,3}total", 85),
        amount_rule("total", r"order\s{1,3}total|total", 70),
    ),
    amount_from_items=True,
    item_patterns=FOOD_ITEM_PATTERNS,
    fee_pattern=FEE_PATTERN,
    subject_item_rules=(
        rule("swiggy_order_from", r"order\s{1,3}from\s{1,3}(?P<value>[^.\n]{3,60}?)(?:\s{1,3}(?:has|is|was)\b|\s{0,2}$)", in_content=False),
    ),
    item_reject_terms=FOOD_ITEM_REJECT_TERMS,
    metadata_rules=FOOD_DETAIL_RULES,
    email_types=FOOD_EMAIL_TYPES,
    status_map=FOOD_STATUS_MAP,
    status_overrides=(
        StatusOverride(("has been delivered", "was delivered", "delivered successfully"), OrderStatus.DELIVERED, ("order_confirmation", "notification")),
    ),
    type_labels=FOOD_TYPE_LABELS,
    default_type_label="Food Order",
    confidence=SWIGGY_CONFIDENCE,
)

BLINKIT = PlatformProfile(
    platform=PlatformId.BLINKIT,
    display_name="Blinkit",
    category=QUICK_DELIVERY,
    amount_category="grocery",
    indicators=("blinkit.com", "@blinkit"),
    sender_domains=("blinkit.com", "grofers.com"),
    order_id_rules=(
        labelled_id_rule("blinkit_order_label", r"ORD\d{6,15}|\d{8,15}", priority=90),
        shape_id_rule("blinkit_order_shape", r"ORD\d{6,15}", priority=70),
    ),
    id_shape=IdentifierShape(min_length=8, max_length=18, allowed=r"ORD\d{6,15}|\d{8,15}"),
    fee_pattern=FEE_PATTERN,
    item_reject_terms=ITEM_REJECT_TERMS + ("blinkit",),
    metadata_rules=GROCERY_DETAIL_RULES,
    type_labels=GROCERY_TYPE_LABELS,
    default_type_label="Grocery Order",
    confidence=QUICK_CONFIDENCE,
)

BIGBASKET = PlatformProfile(
    platform=PlatformId.BIGBASKET,
    display_name="BigBasket",
    category=QUICK_DELIVERY,
    amount_category="grocery",
    indicators=("bigbasket.com", "@bigbasket", "big basket"),
    sender_domains=("bigbasket.com", "bigbasket.in"),
    order_id_rules=(
        labelled_id_rule("bigbasket_order_label", r"BB\d{8,15}", priority=95),
        labelled_id_rule("bigbasket_order_alnum", r"(?=[A-Z]{0,19}\d)[A-Z0-9]{8,20}", priority=85),
        shape_id_rule("bigbasket_order_shape", r"BB\d{8,15}", priority=70),
    ),
    id_shape=IdentifierShape(min_length=8, max_length=20, allowed=r"[A-Z0-9]{8,20}"),
    item_patterns=RETAIL_ITEM_PATTERNS,
    fee_pattern=FEE_PATTERN,
    subject_item_rules=SUBJECT_ITEM_RULES,
    item_reject_terms=ITEM_REJECT_TERMS + ("bigbasket",),
    metadata_rules=GROCERY_DETAIL_RULES,
    status_map=frozen_map({**RETAIL_STATUS_MAP, "notification": OrderStatus.ORDERED}),
    type_labels=GROCERY_TYPE_LABELS,
    default_type_label="Grocery Order",
    confidence=QUICK_CONFIDENCE,
)

ZEPTO = PlatformProfile(
    platform=PlatformId.ZEPTO,
    display_name="Zepto",
    category=QUICK_DELIVERY,
    amount_category="grocery",
    indicators=("zepto.in", "@zepto", "zeptonow.com"),
    sender_domains=("zepto.in", "zeptonow.com", "zepto.co.in"),
    order_id_rules=(
        labelled_id_rule("zepto_order_label", r"(?=[A-Z]{0,19}\d)[A-Z0-9]{8,20}", priority=90),
    ),
    id_shape=IdentifierShape(min_length=8, max_length=20, allowed=r"[A-Z0-9]{8,20}"),
    fee_pattern=FEE_PATTERN,
    item_reject_terms=ITEM_REJECT_TERMS + ("zepto",),
    metadata_rules=GROCERY_DETAIL_RULES,
    type_labels=GROCERY_TYPE_LABELS,
    default_type_label="Grocery Order",
    confidence=QUICK_CONFIDENCE,
)

DOMINOS = PlatformProfile(
    platform=PlatformId.DOMINOS,
    display_name="Domino's",
    category=QUICK_DELIVERY,
    amount_category="food",
    indicators=("dominos.co.in", "@dominos", "domino's", "jubilantfoodworks"),
    sender_domains=("dominos.co.in", "dominos.com", "jublfood.com"),
    order_keywords=ORDER_KEYWORDS + ("preparing", "baking", "on the way"),
    order_id_rules=(
        labelled_id_rule("dominos_order_label", r"(?=[A-Z]{0,11}\d)[A-Z0-9]{6,12}", priority=90),
    ),
    id_shape=IdentifierShape(min_length=6, max_length=12, allowed=r"[A-Z0-9]{6,12}"),
    amount_rules=(
        amount_rule("amount_paid", r"amount\s{1,3}paid|you\s{1,3}paid", 100),
        amount_rule("bill_amount", r"bill\s{1,3}amount|total\s{1,3}amount|net\s{1,3}amount", 95),
        amount_rule("total", r"total|bill|amount", 70),
        rule("rupee_before_total", r"₹\s{0,3}(?P<value>[\d,]{1,7}(?:\.\d{1,2})?)\s{0,3}(?:total|amount|bill)\b", 65),
    ),
    item_patterns=FOOD_ITEM_PATTERNS + (
        ItemPattern(
            "dominos_name_dash_price",
            rf"^(?P<name>{ITEM_NAME})\s{{1,3}}[\-–]\s{{1,3}}{ITEM_PRICE}\s{{0,3}}$",
        ),
    ),
    item_reject_terms=FOOD_ITEM_REJECT_TERMS + ("domino", "dominos"),
    metadata_rules=FOOD_DETAIL_RULES,
    email_types=(
        EmailTypeRule("cancellation", ("cancelled", "canceled")),
        EmailTypeRule("delivery_notification", ("delivered",)),
        EmailTypeRule("dispatch_notification", ("dispatched", "out for delivery", "on the way")),
        EmailTypeRule("preparation_notification", ("preparing", "baking", "in the oven")),
        EmailTypeRule("order_confirmation", ("confirmed", "placed", "received")),
    ),
    default_email_type="order_update",
    status_map=frozen_map({
        "cancellation": OrderStatus.CANCELLED,
        "delivery_notification": OrderStatus.DELIVERED,
        "dispatch_notification": OrderStatus.OUT_FOR_DELIVERY,
        "preparation_notification": OrderStatus.PROCESSING,
        "order_confirmation": OrderStatus.CONFIRMED,
        "order_update": OrderStatus.PROCESSING,
    }),
    status_overrides=(),
    type_labels=frozen_map({
        "order_confirmation": "Pizza Order",
        "preparation_notification": "Pizza Order Being Prepared",
        "dispatch_notification": "Pizza Order On the Way",
        "delivery_notification": "Delivered Pizza Order",
        "cancellation": "Cancelled Pizza Order",
    }),
    default_type_label="Pizza Order",
    confidence=QUICK_CONFIDENCE,
)


PROFILES = (
    SWIGGY,
    BLINKIT,
    BIGBASKET,
    ZEPTO,
    DOMINOS,
)
