"""
Order Parser Base - Shared Rule Vocabulary

Contains:
- Rule types consumed by the generic extractor (ExtractionRule, ItemPattern,
  IdentifierShape, EmailTypeRule, StatusOverride, FieldRule, ConfidenceWeights)
- PlatformProfile: the declarative table describing one platform
- Shared rule constants (order id labels, rupee amount voting rules,
  keyword lists, email types, status maps, confidence presets)

Every pattern uses bounded repetition; the registry rejects `*`, `+` and
`{n,}` when it validates the tables.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Pattern

from mailorder.error_tracking import RuleTableError
from mailorder.models import OrderStatus, PlatformCategory, PlatformId


@dataclass(frozen=True)
class ExtractionRule:
    """One pattern of a field cascade.

    The captured value is the `value` named group when present, else the
    first group, else the whole match.
    """
    name: str
    pattern: str
    priority: int = 50
    in_subject: bool = True
    in_content: bool = True
    flags: int = re.IGNORECASE
    regex: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            compiled = re.compile(self.pattern, self.flags)
        except re.error as e:
            raise RuleTableError(self.name, f"invalid pattern: {e}")
        object.__setattr__(self, "regex", compiled)

    def capture(self, match) -> str:
        if "value" in self.regex.groupindex:
            value = match.group("value")
        elif self.regex.groups:
            value = match.group(1)
        else:
            value = match.group(0)
        return (value or "").strip()


def rule(name: str, pattern: str, priority: int = 50, **options) -> ExtractionRule:
    return ExtractionRule(name=name, pattern=pattern, priority=priority, **options)


@dataclass(frozen=True)
class ItemPattern:
    """Line-item pattern with named groups `name` and optional `qty` / `price`."""
    name: str
    pattern: str
    item_type: str = "item"
    flags: int = re.IGNORECASE | re.MULTILINE
    regex: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            compiled = re.compile(self.pattern, self.flags)
        except re.error as e:
            raise RuleTableError(self.name, f"invalid item pattern: {e}")
        if "name" not in compiled.groupindex:
            raise RuleTableError(self.name, "item pattern needs a 'name' group")
        object.__setattr__(self, "regex", compiled)


@dataclass(frozen=True)
class IdentifierShape:
    """Validator bounds for an order or tracking id."""
    min_length: int = 5
    max_length: int = 30
    allowed: Optional[str] = None  # full-match, case-sensitive
    exclude: tuple = ()  # full-match patterns that are never ids
    require_digit: bool = True


@dataclass(frozen=True)
class EmailTypeRule:
    email_type: str
    subject_keywords: tuple
    content_keywords: tuple = ()


@dataclass(frozen=True)
class StatusOverride:
    """Content keyword that refines the mapped status for some email types."""
    keywords: tuple
    status: OrderStatus
    email_types: tuple = ()


@dataclass(frozen=True)
class FieldRule:
    """Metadata rule: `field` is tracking_id, seller_name, expected_delivery
    or a details key such as destination / origin / store_name."""
    field: str
    rule: ExtractionRule


@dataclass(frozen=True)
class ConfidenceWeights:
    base: float
    ceiling: float
    weights: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if not isinstance(self.weights, MappingProxyType):
            object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))


def frozen_map(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


# ============================================================================
# Keyword lists
# ============================================================================

ORDER_KEYWORDS = (
    "order", "ordered", "placed", "confirmed", "confirmation", "shipped",
    "dispatched", "delivered", "out for delivery", "cancelled", "canceled",
    "refund", "return", "invoice", "receipt", "purchase", "payment",
    "tracking", "shipment", "arriving",
)

COURIER_KEYWORDS = (
    "tracking", "shipment", "shipped", "delivered", "dispatched", "awb",
    "consignment", "waybill", "out for delivery", "in transit", "picked up",
    "pickup", "booked", "delivery", "parcel", "package", "courier",
)

PROMOTIONAL_KEYWORDS = (
    "offer", "sale", "discount", "deal", "browse", "explore", "recommended",
    "wishlist", "cart", "newsletter", "unsubscribe", "cashback", "coupon",
    "advertisement", "promo", "marketing", "review your", "rate your",
    "feedback",
)

ITEM_REJECT_TERMS = (
    "order", "orders", "total", "amount", "subtotal", "sub total", "tax", "gst",
    "discount", "delivery", "fee", "charge", "charges", "payment", "email",
    "notification", "invoice", "paid", "shipping", "savings", "coupon",
    "cashback", "balance", "refund",
    "mrp", "price", "save", "saved",
)


# ============================================================================
# Shared rules
# ============================================================================

RUPEE_VALUE = r"₹\s{0,3}(?P<value>[\d,]{1,12}(?:\.\d{1,2})?)"
LABEL_SEPARATOR = r"\s{0,3}[:\-]?\s{0,3}(?:Rs\.?\s{0,2})?"


def amount_rule(name: str, labels: str, priority: int) -> ExtractionRule:
    """Rupee amount preceded by one of the labels."""
    return rule(name, rf"\b(?:{labels}){LABEL_SEPARATOR}{RUPEE_VALUE}", priority)


# Priority follows how explicitly the label names the charged total
RUPEE_AMOUNT_RULES = (
    amount_rule("amount_paid", r"amount\s{1,3}paid|you\s{1,3}paid|paid\s{1,3}amount|total\s{1,3}paid", 100),
    amount_rule("bill_amount", r"bill\s{1,3}amount|total\s{1,3}amount|net\s{1,3}amount", 95),
    amount_rule("grand_total", r"grand\s{1,3}total|order\s{1,3}total|invoice\s{1,3}total", 90),
    amount_rule("final_amount", r"final\s{1,3}amount|bill\s{1,3}total|total\s{1,3}price", 85),
    amount_rule("payable", r"amount\s{1,3}payable|total\s{1,3}payable|payable|payment", 80),
    amount_rule("total", r"total", 70),
    rule("bare_rupee", RUPEE_VALUE, 50),
)

COD_AMOUNT_RULES = (
    amount_rule("cod_amount", r"cod\s{1,3}amount|cash\s{1,3}on\s{1,3}delivery|amount\s{1,3}to\s{1,3}be\s{1,3}collected|amount\s{1,3}to\s{1,3}collect", 100),
    amount_rule("courier_charges", r"shipping\s{1,3}charges|courier\s{1,3}charges|freight|charges", 80),
)

ID_LABELS = r"order\s{0,2}(?:id|no\.?|number|#)?"
TRACKING_LABELS = (
    r"awb(?:\s{0,2}(?:no\.?|number))?|tracking\s{0,2}(?:id|no\.?|number)"
    r"|consignment\s{0,2}(?:id|no\.?|number)?|waybill(?:\s{0,2}(?:no\.?|number))?"
    r"|shipment\s{0,2}(?:id|no\.?|number)"
)


def labelled_id_rule(name: str, value: str, labels: str = ID_LABELS, priority: int = 90, **options) -> ExtractionRule:
    """Identifier that follows an order / tracking label."""
    return rule(
        name,
        rf"\b(?:{labels})\s{{0,3}}[:#\-]?\s{{0,3}}#?\s{{0,2}}(?P<value>{value})\b",
        priority,
        **options,
    )


def shape_id_rule(name: str, value: str, priority: int = 60, **options) -> ExtractionRule:
    """Bare identifier recognised by its shape alone (case-sensitive)."""
    options.setdefault("flags", 0)
    return rule(name, rf"(?<![A-Za-z0-9\-])(?P<value>{value})(?![A-Za-z0-9])", priority, **options)


def detail_rule(field_name: str, labels: str, value: str = r"[^,\n]{3,100}", name: Optional[str] = None) -> FieldRule:
    return FieldRule(
        field_name,
        rule(name or field_name, rf"\b(?:{labels})\s{{0,3}}[:\-]\s{{0,3}}(?P<value>{value})", in_subject=False),
    )


EXPECTED_DELIVERY_RULE = detail_rule(
    "expected_delivery",
    r"expected\s{1,3}delivery(?:\s{1,3}date)?|delivery\s{1,3}by|arriving\s{1,3}by|arriving|estimated\s{1,3}delivery|eta",
    value=r"[^\n]{5,50}",
)
SELLER_RULE = detail_rule("seller_name", r"sold\s{1,3}by|seller", value=r"[A-Za-z0-9&.' ]{3,60}")
TRACKING_RULE = detail_rule(
    "tracking_id", r"awb(?:\s{1,3}(?:no\.?|number))?|tracking\s{1,3}(?:id|no\.?|number)",
    value=r"[A-Z0-9]{8,25}",
)

COURIER_DETAIL_RULES = (
    detail_rule("destination", r"destination|delivery\s{1,3}address|deliver\s{1,3}to|ship\s{1,3}to|consignee|recipient|addressee"),
    detail_rule("origin", r"origin|ship\s{1,3}from|pickup\s{1,3}location|shipper|sender|consignor"),
    detail_rule("description", r"description|contents|package\s{1,3}contents|item\s{1,3}description"),
    detail_rule("weight", r"weight|wt\.?", value=r"\d{1,5}(?:\.\d{1,3})?\s{0,2}(?:kgs?|grams?|gms?|lbs?|g)\b"),
    detail_rule("pieces", r"no\.?\s{1,3}of\s{1,3}pieces|pieces?|packages", value=r"\d{1,3}\b"),
    detail_rule("service_type", r"service\s{1,3}type|article\s{1,3}type|product\s{1,3}type|service", value=r"[^,\n]{3,50}"),
    detail_rule("delivery_agent", r"delivery\s{1,3}agent|delivered\s{1,3}by|courier\s{1,3}partner|agent", value=r"[^,\n]{3,50}"),
    EXPECTED_DELIVERY_RULE,
)

FOOD_DETAIL_RULES = (
    detail_rule("store_name", r"restaurant|outlet|store", value=r"[^,\n]{3,80}"),
    detail_rule("delivery_address", r"delivery\s{1,3}address|deliver(?:ing)?\s{1,3}to", value=r"[^\n]{5,150}"),
    EXPECTED_DELIVERY_RULE,
)

GROCERY_DETAIL_RULES = (
    detail_rule("delivery_slot", r"delivery\s{1,3}slot|time\s{1,3}slot|slot", value=r"[^,\n]{5,50}"),
    detail_rule("delivery_address", r"delivery\s{1,3}address|deliver(?:ing)?\s{1,3}to", value=r"[^\n]{5,150}"),
    EXPECTED_DELIVERY_RULE,
)


# ============================================================================
# Item patterns
# ============================================================================

ITEM_NAME = r"[A-Za-z][A-Za-z0-9 \-&.'()/%,+]{2,80}?"
ITEM_PRICE = r"₹\s{0,3}(?P<price>[\d,]{1,9}(?:\.\d{1,2})?)"

QTY_NAME_PRICE = ItemPattern(
    "qty_name_price",
    rf"^\s{{0,3}}(?P<qty>\d{{1,3}})\s{{0,2}}[x×]\s{{1,3}}(?P<name>{ITEM_NAME})\s{{0,3}}[\-–:|]?\s{{0,3}}{ITEM_PRICE}",
)
NAME_QTY_PRICE = ItemPattern(
    "name_qty_price",
    rf"^(?P<name>{ITEM_NAME})\s{{1,3}}(?:x|×|qty\s{{0,2}}:?)\s{{0,2}}(?P<qty>\d{{1,3}})\s{{0,3}}[\-–:|]?\s{{0,3}}{ITEM_PRICE}",
)
NAME_PRICE = ItemPattern(
    "name_price",
    rf"^(?P<name>{ITEM_NAME})\s{{0,3}}[\-–:|]?\s{{0,3}}{ITEM_PRICE}\s{{0,3}}$",
)
LABELLED_ITEM = ItemPattern(
    "labelled_item",
    rf"^\s{{0,3}}(?:item|product|article)(?:\s{{1,2}}name)?\s{{0,2}}:\s{{0,3}}(?P<name>{ITEM_NAME})\s{{0,3}}$",
)

RETAIL_ITEM_PATTERNS = (QTY_NAME_PRICE, NAME_QTY_PRICE, NAME_PRICE, LABELLED_ITEM)

FEE_PATTERN = ItemPattern(
    "fee_line",
    r"^\s{0,3}(?P<name>(?:delivery|handling|platform|packaging|packing|small\s{1,2}cart|convenience|surge|late\s{1,2}night)"
    rf"\s{{1,2}}(?:fee|charges?))\s{{0,3}}[:\-–|]?\s{{0,3}}{ITEM_PRICE}",
    item_type="fee",
)

ORDER_FOR_SUBJECT_ITEM = rule(
    "order_for_subject",
    r"your\s{1,3}order\s{1,3}for\s{1,3}(?P<value>[^.\n]{3,100}?)(?:\.{3})?\s{1,3}has\s{1,3}been",
    in_content=False,
)
FROM_ORDER_SUBJECT_ITEM = rule(
    "from_order_subject",
    r"^(?P<value>[^.\n]{3,100}?)(?:\.{3})?\s{1,3}from\s{1,3}your\s{1,3}order\s{1,3}has\s{1,3}been",
    in_content=False,
)
SUBJECT_ITEM_RULES = (ORDER_FOR_SUBJECT_ITEM, FROM_ORDER_SUBJECT_ITEM)


ORDER_DATE_RULES = (
    rule("order_date", r"\b(?:order(?:ed)?\s{1,3}(?:date|on)|placed\s{1,3}on|invoice\s{1,3}date|date\s{1,3}of\s{1,3}order)\s{0,3}[:\-]?\s{0,3}(?P<value>[^\n]{6,40})", in_subject=False),
)

COURIER_DATE_RULES = (
    rule("shipped_on", r"\b(?:shipped\s{1,3}on|dispatch(?:ed)?\s{1,3}(?:date|on)|booking\s{1,3}date|booked\s{1,3}on|pickup\s{1,3}date|ship\s{1,3}date)\s{0,3}[:\-]?\s{0,3}(?P<value>[^\n]{6,40})", in_subject=False),
) + ORDER_DATE_RULES


# ============================================================================
# Email types and status maps
# ============================================================================

RETAIL_EMAIL_TYPES = (
    EmailTypeRule("cancellation", ("cancelled", "canceled", "cancellation")),
    EmailTypeRule("return_notification", ("return", "refund")),
    EmailTypeRule("out_for_delivery_notification", ("out for delivery",)),
    EmailTypeRule("delivery_notification", ("delivered", "delivery confirmed")),
    EmailTypeRule("shipping_notification", ("shipped", "dispatched", "on its way", "on the way", "in transit")),
    EmailTypeRule("order_confirmation", ("placed", "confirmed", "confirmation", "received", "thank you for your order", "successful")),
    EmailTypeRule("tracking_update", ("tracking", "status", "update")),
)

RETAIL_STATUS_MAP = frozen_map({
    "order_confirmation": OrderStatus.CONFIRMED,
    "shipping_notification": OrderStatus.SHIPPED,
    "out_for_delivery_notification": OrderStatus.OUT_FOR_DELIVERY,
    "delivery_notification": OrderStatus.DELIVERED,
    "cancellation": OrderStatus.CANCELLED,
    "return_notification": OrderStatus.RETURNED,
    "tracking_update": OrderStatus.SHIPPED,
    "notification": OrderStatus.ORDERED,
})

RETAIL_STATUS_OVERRIDES = (
    StatusOverride(("out for delivery",), OrderStatus.OUT_FOR_DELIVERY, ("tracking_update",)),
    StatusOverride(("has been delivered", "was delivered", "delivered successfully"), OrderStatus.DELIVERED, ("tracking_update",)),
)

RETAIL_TYPE_LABELS = frozen_map({
    "order_confirmation": "Order",
    "shipping_notification": "Shipped Order",
    "out_for_delivery_notification": "Order Out for Delivery",
    "delivery_notification": "Delivered Order",
    "cancellation": "Cancelled Order",
    "return_notification": "Returned Order",
    "tracking_update": "Order Update",
})

COURIER_EMAIL_TYPES = (
    EmailTypeRule("exception", ("exception", "delayed", "delay", "failed", "undelivered", "unable to deliver", "held")),
    EmailTypeRule("out_for_delivery_notification", ("out for delivery",)),
    EmailTypeRule("delivery_notification", ("delivered", "delivery confirmed")),
    EmailTypeRule("pickup", ("picked up", "pickup", "picked")),
    EmailTypeRule("dispatch", ("dispatched", "shipped", "in transit", "arrived", "forwarded", "on its way", "on the way")),
    EmailTypeRule("booking", ("booked", "booking", "registered", "manifested", "created")),
    EmailTypeRule("tracking_update", ("tracking", "status", "update")),
)

COURIER_STATUS_MAP = frozen_map({
    "exception": OrderStatus.EXCEPTION,
    "out_for_delivery_notification": OrderStatus.OUT_FOR_DELIVERY,
    "delivery_notification": OrderStatus.DELIVERED,
    "pickup": OrderStatus.PICKED_UP,
    "dispatch": OrderStatus.IN_TRANSIT,
    "booking": OrderStatus.BOOKED,
    "tracking_update": OrderStatus.IN_TRANSIT,
    "courier_notification": OrderStatus.IN_TRANSIT,
})

COURIER_STATUS_OVERRIDES = (
    StatusOverride(("out for delivery",), OrderStatus.OUT_FOR_DELIVERY, ("tracking_update", "courier_notification")),
    StatusOverride(("has been delivered", "was delivered", "delivered successfully", "successfully delivered"), OrderStatus.DELIVERED, ("tracking_update", "courier_notification")),
    StatusOverride(("picked up",), OrderStatus.PICKED_UP, ("courier_notification",)),
)

COURIER_TYPE_LABELS = frozen_map({
    "exception": "Delivery Exception",
    "out_for_delivery_notification": "Out for Delivery",
    "delivery_notification": "Delivered Package",
    "pickup": "Picked Up Package",
    "dispatch": "Shipped Package",
    "booking": "Booked Shipment",
    "tracking_update": "Package Update",
    "courier_notification": "Courier Service",
})


# ============================================================================
# Confidence presets
# ============================================================================

RETAIL_CONFIDENCE = ConfidenceWeights(
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

COURIER_CONFIDENCE = ConfidenceWeights(
    base=0.0,
    ceiling=0.95,
    weights={
        "order_id": 0.45,
        "email_type": 0.1,
        "destination": 0.1,
        "origin": 0.05,
        "description": 0.1,
        "weight": 0.05,
        "service_type": 0.05,
        "pieces": 0.05,
        "metadata": 0.05,
    },
)


@dataclass(frozen=True)
class PlatformProfile:
    """Declarative rule table for one platform."""
    platform: PlatformId
    display_name: str
    category: PlatformCategory
    indicators: tuple
    sender_domains: tuple
    order_id_rules: tuple
    amount_category: str = "retail"
    currency: Optional[str] = None  # falls back to ExtractionConfig.currency
    id_shape: IdentifierShape = IdentifierShape()
    order_keywords: tuple = ORDER_KEYWORDS
    reject_keywords: tuple = PROMOTIONAL_KEYWORDS
    amount_rules: tuple = RUPEE_AMOUNT_RULES
    item_patterns: tuple = RETAIL_ITEM_PATTERNS
    fee_pattern: Optional[ItemPattern] = None
    subject_item_rules: tuple = SUBJECT_ITEM_RULES
    date_rules: tuple = ORDER_DATE_RULES
    metadata_rules: tuple = (EXPECTED_DELIVERY_RULE, SELLER_RULE)
    email_types: tuple = RETAIL_EMAIL_TYPES
    default_email_type: str = "notification"
    status_map: Mapping = field(default_factory=lambda: RETAIL_STATUS_MAP)
    status_overrides: tuple = RETAIL_STATUS_OVERRIDES
    type_labels: Mapping = field(default_factory=lambda: RETAIL_TYPE_LABELS)
    default_type_label: str = "Order"
    placeholder_template: str = "{display_name} {label} {order_id}"
    item_reject_terms: tuple = ITEM_REJECT_TERMS
    no_amount_label: Optional[str] = None
    id_is_tracking: bool = False
    carrier: Optional[str] = None
    amount_from_items: bool = False
    confidence: ConfidenceWeights = RETAIL_CONFIDENCE

    @property
    def is_courier(self) -> bool:
        return self.no_amount_label is not None

    def all_rules(self):
        """Every ExtractionRule / ItemPattern in the table, for validation."""
        yield from self.order_id_rules
        yield from self.amount_rules
        yield from self.item_patterns
        if self.fee_pattern is not None:
            yield self.fee_pattern
        yield from self.subject_item_rules
        yield from self.date_rules
        for field_rule in self.metadata_rules:
            yield field_rule.rule
