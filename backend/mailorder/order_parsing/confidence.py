"""
Confidence Scorer

confidence = clamp(base + sum(weight * signal), 0, ceiling), rounded to two
decimals. Deterministic and side-effect free; weights and ceilings come from
each platform's ConfidenceWeights.
"""

from typing import Iterable, Mapping, Optional

# Metadata fields that count towards the "metadata" signal
METADATA_FIELDS = ('tracking_id', 'expected_delivery', 'seller_name', 'delivery_slot')

# Shipment details scored individually by courier profiles
DETAIL_SIGNALS = ('destination', 'origin', 'description', 'weight', 'service_type', 'pieces')


def compute_signals(
    order_id: Optional[str],
    amount: Optional[float],
    items: Iterable,
    email_type: str,
    default_email_type: str,
    metadata: Optional[Mapping[str, str]] = None,
) -> dict:
    """
    Boolean signals for one extraction.

    Args:
        order_id: Validated order / tracking id
        amount: Extracted amount (None when not found)
        items: Final line items
        email_type: Detected email type
        default_email_type: Type assigned when no keyword matched
        metadata: Fields found by metadata rules (never derived values)

    Returns:
        Dict of signal name -> 0 or 1
    """
    metadata = metadata or {}
    items = list(items)
    products = [item for item in items if item.item_type == 'item']
    real_items = [item for item in products if item.source == 'content']

    signals = {
        'order_id': int(bool(order_id)),
        'amount': int(amount is not None and amount > 0),
        'real_items': int(bool(real_items)),
        'placeholder_items': int(bool(products) and not real_items),
        'priced_items': int(any(item.total_price for item in real_items)),
        'email_type': int(bool(email_type) and email_type != default_email_type),
        'metadata': int(any(metadata.get(name) for name in METADATA_FIELDS)),
    }
    for name in DETAIL_SIGNALS:
        signals[name] = int(bool(metadata.get(name)))
    return signals


def score(weights, signals: Mapping[str, int]) -> float:
    """Apply a ConfidenceWeights preset to computed signals."""
    total = weights.base
    for name, weight in weights.weights.items():
        total += weight * signals.get(name, 0)
    return round(min(max(total, 0.0), weights.ceiling), 2)
