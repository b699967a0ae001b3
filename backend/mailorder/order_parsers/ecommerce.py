"""
E-commerce Rule Tables

Amazon, Flipkart, Myntra, AJIO, Meesho, Tata CLiQ, FirstCry, Paytm Mall,
Snapdeal, Reliance Digital
"""

from mailorder.models import PlatformCategory, PlatformId

from .base import (
    ID_LABELS,
    ITEM_REJECT_TERMS,
    PROMOTIONAL_KEYWORDS,
    SUBJECT_ITEM_RULES,
    TRACKING_RULE,
    EXPECTED_DELIVERY_RULE,
    SELLER_RULE,
    IdentifierShape,
    PlatformProfile,
    labelled_id_rule,
    rule,
    shape_id_rule,
)


ECOMMERCE = PlatformCategory.ECOMMERCE
RETAIL_METADATA = (EXPECTED_DELIVERY_RULE, SELLER_RULE, TRACKING_RULE)

GENERIC_ALNUM_ID = r"(?=[A-Z]{0,19}\d)[A-Z0-9]{8,20}"


AMAZON = PlatformProfile(
    platform=PlatformId.AMAZON,
    display_name="Amazon",
    category=ECOMMERCE,
    indicators=(
        "amazon.in", "amazon.com", "@amazon", "auto-confirm@amazon",
        "shipment-tracking@amazon", "amazon.in order", "order-update@amazon",
    ),
    sender_domains=("amazon.in", "amazon.com"),
    order_id_rules=(
        labelled_id_rule("amazon_order_label", r"[D\d]\d{2}-\d{7}-\d{7}", priority=95),
        shape_id_rule("amazon_order_shape", r"[D\d]\d{2}-\d{7}-\d{7}", priority=80),
    ),
    id_shape=IdentifierShape(min_length=19, max_length=19, allowed=r"[D\d]\d{2}-\d{7}-\d{7}"),
    subject_item_rules=(
        rule(
            "amazon_order_of",
            r"order\s{1,3}of\s{1,3}\"?(?P<value>[^\"\n]{3,100}?)\"?"
            r"(?:\s{1,3}and\s{1,3}\d{1,3}\s{1,3}more\s{1,3}items?)?\s{1,3}has\s{1,3}been",
            in_content=False,
        ),
        rule("amazon_ordered_prefix", r"^ordered:\s{0,3}\"?(?P<value>[^\"\n]{3,100}?)\"?(?:\.{3})?\s{0,3}$", in_content=False),
        rule("amazon_shipped_prefix", r"^(?:shipped|dispatched|delivered):\s{0,3}\"?(?P<value>[^\"\n]{3,100}?)\"?(?:\.{3})?\s{0,3}$", in_content=False),
    ),
    metadata_rules=RETAIL_METADATA,
)

FLIPKART = PlatformProfile(
    platform=PlatformId.FLIPKART,
    display_name="Flipkart",
    category=ECOMMERCE,
    indicators=("flipkart.com", "@flipkart", "nct.flipkart.com", "rmt.flipkart.com"),
    sender_domains=("flipkart.com",),
    order_id_rules=(
        labelled_id_rule("flipkart_order_label", r"OD\d{15,21}", priority=95),
        shape_id_rule("flipkart_order_shape", r"OD\d{15,21}", priority=80),
    ),
    id_shape=IdentifierShape(min_length=17, max_length=23, allowed=r"OD\d{15,21}"),
    subject_item_rules=SUBJECT_ITEM_RULES + (
        rule("flipkart_item_subject", r"(?:order\s{1,3}for|your)\s{1,3}(?P<value>[^.\n]{3,80}?)\s{1,3}(?:has\s{1,3}been|is\s{1,3}out|was)", in_content=False),
    ),
    metadata_rules=RETAIL_METADATA,
)

MYNTRA = PlatformProfile(
    platform=PlatformId.MYNTRA,
    display_name="Myntra",
    category=ECOMMERCE,
    indicators=("myntra.com", "@myntra"),
    sender_domains=("myntra.com",),
    order_id_rules=(
        labelled_id_rule("myntra_order_label", r"\d{7}-\d{7}-\d{7}|\d{10,20}", priority=90),
        shape_id_rule("myntra_order_shape", r"\d{7}-\d{7}-\d{7}", priority=70),
    ),
    id_shape=IdentifierShape(min_length=10, max_length=23, allowed=r"\d{7}-\d{7}-\d{7}|\d{10,20}"),
    metadata_rules=RETAIL_METADATA,
)

AJIO = PlatformProfile(
    platform=PlatformId.AJIO,
    display_name="AJIO",
    category=ECOMMERCE,
    indicators=("ajio.com", "@ajio"),
    sender_domains=("ajio.com",),
    order_id_rules=(
        labelled_id_rule("ajio_order_label", r"FN\d{8,14}|\d{10,15}", priority=90),
        shape_id_rule("ajio_order_shape", r"FN\d{8,14}", priority=70),
    ),
    id_shape=IdentifierShape(min_length=10, max_length=16, allowed=r"FN\d{8,14}|\d{10,15}"),
    metadata_rules=RETAIL_METADATA,
)

MEESHO = PlatformProfile(
    platform=PlatformId.MEESHO,
    display_name="Meesho",
    category=ECOMMERCE,
    amount_category="value_retail",
    indicators=("meesho.com", "@meesho"),
    sender_domains=("meesho.com",),
    order_id_rules=(
        labelled_id_rule("meesho_order_label", r"MS\d{8,15}", priority=95),
        labelled_id_rule("meesho_order_alnum", GENERIC_ALNUM_ID, priority=85),
        shape_id_rule("meesho_order_shape", r"MS\d{8,15}", priority=70),
    ),
    id_shape=IdentifierShape(min_length=8, max_length=20, allowed=r"[A-Z0-9]{8,20}"),
    subject_item_rules=SUBJECT_ITEM_RULES + (
        rule("meesho_your_item_order", r"your\s{1,3}(?P<value>[A-Z][A-Za-z &\-]{2,60}?)\s{1,3}order", in_content=False),
    ),
    reject_keywords=PROMOTIONAL_KEYWORDS + ("catalog",),
    item_reject_terms=ITEM_REJECT_TERMS + ("catalog",),
    metadata_rules=RETAIL_METADATA,
)

TATACLIQ = PlatformProfile(
    platform=PlatformId.TATACLIQ,
    display_name="Tata CLiQ",
    category=ECOMMERCE,
    indicators=("tatacliq.com", "@tatacliq", "tata cliq"),
    sender_domains=("tatacliq.com",),
    order_id_rules=(
        labelled_id_rule("tatacliq_order_label", r"\d{12,18}|[A-Z]{2,4}\d{8,16}", priority=90),
    ),
    id_shape=IdentifierShape(min_length=10, max_length=20, allowed=r"\d{12,18}|[A-Z]{2,4}\d{8,16}"),
    metadata_rules=RETAIL_METADATA,
)

FIRSTCRY = PlatformProfile(
    platform=PlatformId.FIRSTCRY,
    display_name="FirstCry",
    category=ECOMMERCE,
    amount_category="value_retail",
    indicators=("firstcry.com", "@firstcry"),
    sender_domains=("firstcry.com",),
    order_id_rules=(
        labelled_id_rule("firstcry_order_label", r"\d{8,14}|FC\d{8,14}", priority=90),
    ),
    id_shape=IdentifierShape(min_length=8, max_length=16, allowed=r"\d{8,14}|FC\d{8,14}"),
    metadata_rules=RETAIL_METADATA,
)

PAYTMMALL = PlatformProfile(
    platform=PlatformId.PAYTMMALL,
    display_name="Paytm Mall",
    category=ECOMMERCE,
    indicators=("paytmmall.com", "@paytmmall", "paytm mall"),
    sender_domains=("paytmmall.com", "paytm.com"),
    order_id_rules=(
        labelled_id_rule("paytmmall_order_label", r"PM[A-Z0-9]{8,15}", priority=95),
        labelled_id_rule("paytmmall_order_alnum", GENERIC_ALNUM_ID, priority=85),
        shape_id_rule("paytmmall_order_shape", r"PM(?=[A-Z]{0,14}\d)[A-Z0-9]{8,15}", priority=75),
        shape_id_rule("paytmmall_order_numeric", r"\d{10,15}", priority=60),
    ),
    id_shape=IdentifierShape(min_length=8, max_length=20, allowed=r"[A-Z0-9]{8,20}"),
    item_reject_terms=ITEM_REJECT_TERMS + ("paytm", "mall"),
    metadata_rules=RETAIL_METADATA,
)

SNAPDEAL = PlatformProfile(
    platform=PlatformId.SNAPDEAL,
    display_name="Snapdeal",
    category=ECOMMERCE,
    amount_category="value_retail",
    indicators=("snapdeal.com", "@snapdeal"),
    sender_domains=("snapdeal.com",),
    order_id_rules=(
        labelled_id_rule("snapdeal_order_label", r"\d{8,14}|SD\d{8,14}", priority=90),
        labelled_id_rule("snapdeal_suborder_label", r"\d{8,14}", labels=r"sub[\s\-]{0,2}order\s{0,2}(?:id|no\.?|number|#)?", priority=80),
    ),
    id_shape=IdentifierShape(min_length=8, max_length=16, allowed=r"\d{8,14}|SD\d{8,14}"),
    metadata_rules=RETAIL_METADATA,
)

RELIANCEDIGITAL = PlatformProfile(
    platform=PlatformId.RELIANCEDIGITAL,
    display_name="Reliance Digital",
    category=ECOMMERCE,
    indicators=("reliancedigital.in", "@reliancedigital", "reliance digital"),
    sender_domains=("reliancedigital.in",),
    order_id_rules=(
        labelled_id_rule("reliancedigital_order_label", r"[A-Z]{2,4}\d{8,16}|\d{10,16}", labels=ID_LABELS, priority=90),
    ),
    id_shape=IdentifierShape(min_length=10, max_length=20, allowed=r"[A-Z]{2,4}\d{8,16}|\d{10,16}"),
    metadata_rules=RETAIL_METADATA,
)


PROFILES = (
    AMAZON,
    FLIPKART,
    MYNTRA,
    AJIO,
    MEESHO,
    TATACLIQ,
    FIRSTCRY,
    PAYTMMALL,
    SNAPDEAL,
    RELIANCEDIGITAL,
)
