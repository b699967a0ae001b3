"""
Result Normalizer

Assembles the immutable OrderDraft: fills explicit sentinels for fields the
email did not carry, resolves the currency and stamps extraction metadata.
"""

from datetime import date
from typing import Mapping, Optional, Sequence, Tuple

from mailorder.models import (
    UNAVAILABLE,
    ExtractionMetadata,
    InboundEmail,
    OrderDraft,
    OrderStatus,
)

from .utilities import format_amount

# Fields routed to top-level OrderDraft attributes rather than details
TOP_LEVEL_FIELDS = ('tracking_id', 'seller_name', 'expected_delivery')


def resolve_amount(profile, amount: Optional[float]) -> Tuple[Optional[float], str, bool]:
    """
    Amount, formatted amount and whether the amount is a sentinel.

    Couriers without a charged amount report 0 with their service label;
    other platforms report None with the "unavailable" marker.
    """
    if amount is not None:
        return amount, format_amount(amount), False
    if profile.is_courier:
        return 0.0, profile.no_amount_label, True
    return None, UNAVAILABLE, True


def build_draft(
    profile,
    email: InboundEmail,
    order_id: str,
    amount: Optional[float],
    currency: str,
    order_date: Optional[date],
    date_source: str,
    status: OrderStatus,
    items: Sequence,
    item_tier: str,
    confidence: float,
    email_type: str,
    amount_method: str,
    fields: Mapping[str, str],
    fired_rules: Sequence[Tuple[str, str]] = (),
) -> OrderDraft:
    """
    Build the OrderDraft for one extraction.

    Args:
        profile: PlatformProfile that produced the extraction
        email: Source email (for provenance)
        order_id: Validated identifier
        amount: Voted amount, or None
        currency: ISO currency code
        order_date: Parsed or received date
        date_source: "email_body", "email_received" or "unavailable"
        status: Mapped OrderStatus
        items: Final line items (never empty)
        item_tier: "content", "subject" or "placeholder"
        confidence: Score from the confidence scorer
        email_type: Detected email type
        amount_method: Winning amount rule, "items_sum" or "not_found"
        fields: Metadata found by metadata rules
        fired_rules: (field, rule name) pairs, in extraction order

    Returns:
        Immutable OrderDraft
    """
    amount, formatted_amount, amount_missing = resolve_amount(profile, amount)

    missing = []
    if amount_missing:
        missing.append('amount')
    if order_date is None:
        missing.append('order_date')
    if item_tier == 'placeholder':
        missing.append('items')

    tracking_id = fields.get('tracking_id')
    if profile.id_is_tracking:
        tracking_id = tracking_id or order_id

    details = {
        key: value for key, value in fields.items()
        if key not in TOP_LEVEL_FIELDS
    }

    metadata = ExtractionMetadata(
        fired_rules=tuple(fired_rules),
        email_type=email_type,
        amount_method=amount_method,
        date_source=date_source,
        item_tier=item_tier,
        missing_fields=tuple(missing),
        sender=email.sender,
        subject=email.subject,
        message_id=email.provider_message_id,
        received_at=email.received_at,
    )

    return OrderDraft(
        platform=profile.platform,
        order_id=order_id,
        amount=amount,
        formatted_amount=formatted_amount,
        currency=currency,
        order_date=order_date,
        status=status,
        items=tuple(items),
        confidence=confidence,
        extraction_metadata=metadata,
        tracking_id=tracking_id,
        seller_name=fields.get('seller_name'),
        expected_delivery=fields.get('expected_delivery'),
        details=details,
    )
