"""
Specialized Rule Tables

Ekart Logistics and the generic fallback used when no platform indicator
matches but the email still carries an order-shaped identifier.
"""

from mailorder.models import PlatformCategory, PlatformId

from .base import (
    COURIER_CONFIDENCE,
    COURIER_DATE_RULES,
    COURIER_DETAIL_RULES,
    COURIER_EMAIL_TYPES,
    COURIER_KEYWORDS,
    COURIER_STATUS_MAP,
    COURIER_STATUS_OVERRIDES,
    COURIER_TYPE_LABELS,
    EXPECTED_DELIVERY_RULE,
    TRACKING_LABELS,
    TRACKING_RULE,
    ConfidenceWeights,
    IdentifierShape,
    PlatformProfile,
    labelled_id_rule,
    shape_id_rule,
)


SPECIALIZED = PlatformCategory.SPECIALIZED


EKART = PlatformProfile(
    platform=PlatformId.EKART,
    display_name="Ekart",
    category=SPECIALIZED,
    amount_category="courier",
    indicators=("ekart.in", "@ekart", "ekartlogistics.com"),
    sender_domains=("ekart.in", "ekartlogistics.com"),
    order_keywords=COURIER_KEYWORDS,
    order_id_rules=(
        labelled_id_rule("ekart_tracking_label", r"FMP[PC]\d{10}", labels=TRACKING_LABELS, priority=95),
        shape_id_rule("ekart_tracking_shape", r"FMP[PC]\d{10}", priority=80),
        labelled_id_rule("ekart_tracking_alnum", r"(?=[A-Z]{0,19}\d)[A-Z0-9]{10,20}", labels=TRACKING_LABELS, priority=70),
    ),
    id_shape=IdentifierShape(min_length=10, max_length=20, allowed=r"[A-Z0-9]{10,20}"),
    amount_rules=(),
    item_patterns=(),
    subject_item_rules=(),
    date_rules=COURIER_DATE_RULES,
    metadata_rules=COURIER_DETAIL_RULES,
    email_types=COURIER_EMAIL_TYPES,
    default_email_type="courier_notification",
    status_map=COURIER_STATUS_MAP,
    status_overrides=COURIER_STATUS_OVERRIDES,
    type_labels=COURIER_TYPE_LABELS,
    default_type_label="Package",
    placeholder_template="{description} - {label}",
    no_amount_label="Courier Service",
    id_is_tracking=True,
    carrier="Ekart Logistics",
    confidence=COURIER_CONFIDENCE,
)

# Sender and subject keywords the generic gate accepts
GENERIC_ORDER_KEYWORDS = (
    "order", "delivered", "shipped", "confirmed", "placed", "amount", "total",
    "paid", "invoice", "receipt", "purchase", "payment", "booking",
)

# Labels a generic transactional email uses in front of its identifier
GENERIC_ID_LABELS = (
    r"order\s{0,2}(?:id|no\.?|number|#)?|invoice\s{0,2}(?:id|no\.?|number|#)?"
    r"|booking\s{0,2}(?:id|no\.?|number|ref)?|reference\s{0,2}(?:id|no\.?|number)?"
    r"|transaction\s{0,2}(?:id|no\.?|number)?|receipt\s{0,2}(?:id|no\.?|number|#)?"
)

GENERIC = PlatformProfile(
    platform=PlatformId.GENERIC,
    display_name="Order",
    category=SPECIALIZED,
    amount_category="retail",
    indicators=(),
    sender_domains=(),
    order_keywords=GENERIC_ORDER_KEYWORDS,
    order_id_rules=(
        labelled_id_rule("generic_labelled_id", r"(?=[A-Z\-]{0,29}\d)[A-Z0-9][A-Z0-9\-]{4,29}", labels=GENERIC_ID_LABELS, priority=90),
        shape_id_rule("generic_amazon_shape", r"\d{3}-\d{7,8}-\d{7,8}", priority=70),
        shape_id_rule("generic_flipkart_shape", r"OD\d{15,21}", priority=70),
        shape_id_rule("generic_prefixed_shape", r"[A-Z]{2,4}\d{10,20}", priority=65),
        shape_id_rule("generic_long_numeric", r"\d{12,18}", priority=60),
        shape_id_rule("generic_alnum_shape", r"(?=[A-Z]{0,19}\d)(?=\d{0,19}[A-Z])[A-Z0-9]{8,20}", priority=55),
    ),
    id_shape=IdentifierShape(min_length=5, max_length=30, allowed=r"[A-Z0-9][A-Z0-9\-]{4,29}"),
    subject_item_rules=(),
    metadata_rules=(EXPECTED_DELIVERY_RULE, TRACKING_RULE),
    default_type_label="Order",
    placeholder_template="{display_name} {order_id}",
    confidence=ConfidenceWeights(
        base=0.3,
        ceiling=0.8,
        weights={
            "order_id": 0.2,
            "amount": 0.2,
            "real_items": 0.1,
            "placeholder_items": 0.05,
            "email_type": 0.05,
        },
    ),
)


PROFILES = (
    EKART,
    GENERIC,
)
