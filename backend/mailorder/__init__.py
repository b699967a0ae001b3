"""
mailorder - transactional email to OrderDraft extraction.

Usage:
    from mailorder import InboundEmail, extract_order

    draft = extract_order(InboundEmail(sender=..., subject=..., html_body=...))
    if draft:
        record = draft.as_record()
"""

from .models import InboundEmail, LineItem, OrderDraft, OrderStatus, PlatformId
from .order_parsing import extract_order, extract_with_trace

__all__ = [
    'InboundEmail',
    'LineItem',
    'OrderDraft',
    'OrderStatus',
    'PlatformId',
    'extract_order',
    'extract_with_trace',
]
