"""
Order Extraction Models

Value objects shared by the classifier, the per-platform rule tables and
the extraction engine:
- InboundEmail: immutable input message
- PlatformId / PlatformCategory: closed tags for supported senders
- OrderStatus: order and courier lifecycle tags
- LineItem / OrderDraft: engine output
- ExtractionTrace: per-call record of what the engine did
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


UNAVAILABLE = "Data not available in email"


class PlatformCategory(str, Enum):
    """Platform groups, in classifier priority order."""
    ECOMMERCE = "ecommerce"
    QUICK_DELIVERY = "quickdelivery"
    LOGISTICS = "logistics"
    SPECIALIZED = "specialized"


class PlatformId(str, Enum):
    """Supported platforms plus the generic and unknown tags."""
    # E-commerce
    AMAZON = "amazon"
    FLIPKART = "flipkart"
    MYNTRA = "myntra"
    AJIO = "ajio"
    MEESHO = "meesho"
    TATACLIQ = "tatacliq"
    FIRSTCRY = "firstcry"
    PAYTMMALL = "paytmmall"
    SNAPDEAL = "snapdeal"
    RELIANCEDIGITAL = "reliancedigital"

    # Quick delivery
    SWIGGY = "swiggy"
    BLINKIT = "blinkit"
    BIGBASKET = "bigbasket"
    ZEPTO = "zepto"
    DOMINOS = "dominos"

    # Logistics
    DELHIVERY = "delhivery"
    ECOMEXPRESS = "ecomexpress"
    ARAMEX = "aramex"
    XPRESSBEES = "xpressbees"
    TCIEXPRESS = "tciexpress"
    SAFEXPRESS = "safexpress"
    GATI = "gati"
    BLUEDART = "bluedart"
    DTDC = "dtdc"
    FEDEX = "fedex"
    INDIAPOST = "indiapost"

    # Specialized
    EKART = "ekart"
    GENERIC = "generic"
    UNKNOWN = "unknown"


class OrderStatus(str, Enum):
    """Order lifecycle, courier lifecycle and failure tags."""
    ORDERED = "ordered"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"

    # Courier lifecycle (shares out_for_delivery and delivered)
    BOOKED = "booked"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"

    EXCEPTION = "exception"
    UNKNOWN = "unknown"


ORDER_LIFECYCLE = (
    OrderStatus.ORDERED,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)

COURIER_LIFECYCLE = (
    OrderStatus.BOOKED,
    OrderStatus.PICKED_UP,
    OrderStatus.IN_TRANSIT,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)

TERMINAL_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.RETURNED})


@dataclass(frozen=True)
class InboundEmail:
    """Transactional email as handed over by the ingestion layer."""
    sender: str = ""
    subject: str = ""
    html_body: str = ""
    text_body: str = ""
    received_at: Optional[datetime] = None
    provider_message_id: Optional[str] = None

    def __post_init__(self):
        # Missing headers/bodies are normalized to empty strings
        for name in ("sender", "subject", "html_body", "text_body"):
            if getattr(self, name) is None:
                object.__setattr__(self, name, "")

    @property
    def sender_domain(self) -> str:
        """Domain part of the sender address, lowercased."""
        address = self.sender.strip().lower()
        if "<" in address and ">" in address:
            address = address[address.rfind("<") + 1:address.rfind(">")]
        if "@" in address:
            return address.rsplit("@", 1)[-1].strip()
        return ""


@dataclass(frozen=True)
class LineItem:
    """One product (or fee) line of an order."""
    name: str
    quantity: int = 1
    unit_price: Optional[float] = None
    total_price: Optional[float] = None
    sku: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    item_type: str = "item"  # "item" | "fee"
    source: str = "content"  # "content" | "subject" | "placeholder"
    tracking_id: Optional[str] = None
    carrier: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.source == "placeholder"

    @property
    def formatted_price(self) -> str:
        if self.total_price is None:
            return UNAVAILABLE
        return f"₹{self.total_price:.2f}"

    def as_record(self) -> dict:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "price": self.total_price,
            "formatted_price": self.formatted_price,
            "sku": self.sku,
            "brand": self.brand,
            "category": self.category,
            "type": self.item_type,
            "source": self.source,
            "tracking_id": self.tracking_id,
            "carrier": self.carrier,
        }


@dataclass(frozen=True)
class ExtractionMetadata:
    """
    Provenance of an OrderDraft.

    Only input-derived values are stamped here (no wall-clock time), so
    repeated extraction of the same email yields an equal draft.
    """
    fired_rules: tuple = ()  # ((field, rule_name), ...)
    email_type: str = "unknown"
    amount_method: str = "not_found"
    date_source: str = "email_received"
    item_tier: str = "placeholder"
    missing_fields: tuple = ()
    sender: str = ""
    subject: str = ""
    message_id: Optional[str] = None
    received_at: Optional[datetime] = None

    def as_record(self) -> dict:
        return {
            "fired_rules": [list(pair) for pair in self.fired_rules],
            "email_type": self.email_type,
            "amount_method": self.amount_method,
            "date_source": self.date_source,
            "item_tier": self.item_tier,
            "missing_fields": list(self.missing_fields),
            "sender": self.sender,
            "subject": self.subject,
            "message_id": self.message_id,
            "received_at": self.received_at.isoformat() if self.received_at else None,
        }


@dataclass(frozen=True)
class OrderDraft:
    """Canonical engine output, prior to any persistence mapping."""
    platform: PlatformId
    order_id: str
    amount: Optional[float]
    formatted_amount: str
    currency: str
    order_date: Optional[date]
    status: OrderStatus
    items: tuple
    confidence: float
    extraction_metadata: ExtractionMetadata
    tracking_id: Optional[str] = None
    seller_name: Optional[str] = None
    expected_delivery: Optional[str] = None
    details: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))
        if not isinstance(self.details, MappingProxyType):
            object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @property
    def email_type(self) -> str:
        return self.extraction_metadata.email_type

    def as_record(self) -> dict:
        """Plain dictionary handed to the persistence layer."""
        return {
            "platform": self.platform.value,
            "order_id": self.order_id,
            "amount": self.amount,
            "formatted_amount": self.formatted_amount,
            "currency": self.currency,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "status": self.status.value,
            "items": [item.as_record() for item in self.items],
            "tracking_id": self.tracking_id,
            "seller_name": self.seller_name,
            "expected_delivery": self.expected_delivery,
            "details": dict(self.details),
            "confidence": self.confidence,
            "extraction_metadata": self.extraction_metadata.as_record(),
        }


@dataclass
class TraceEvent:
    stage: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class ExtractionTrace:
    """
    Per-call record of the engine's decisions.

    Created fresh for every extract() call and returned to the caller;
    nothing in it is shared between calls.
    """
    message_id: Optional[str] = None
    platform: Optional[PlatformId] = None
    outcome: Optional[str] = None
    stage: Optional[str] = None  # stage currently running
    events: list = field(default_factory=list)

    def begin(self, stage: str) -> None:
        self.stage = stage

    def record(self, stage: str, message: str, **context: Any) -> None:
        self.events.append(TraceEvent(stage=stage, message=message, context=context))

    def stages(self) -> list:
        return [event.stage for event in self.events]
