"""
Platform Classifier

Decides which platform rule table applies to an inbound email.

Platforms are tested in a fixed priority order (ecommerce > quick delivery
> logistics > specialized, then table order within a category). The first
platform whose indicator substring appears in the sender, subject or body
wins, whatever the position of the match. When nothing matches, the email
is labelled generic only if it carries an order-shaped identifier and an
order keyword.
"""

import re
from typing import Optional, Sequence

from mailorder.logging_config import get_logger
from mailorder.models import InboundEmail, PlatformId
from mailorder.order_parsers import ALL_PROFILES

from .utilities import prepare_content

logger = get_logger(__name__)

# Order-shaped identifiers (case-sensitive, original-case text)
ORDER_ID_SHAPES = [
    re.compile(r'\b\d{3}-\d{7,8}-\d{7,8}\b'),  # Amazon style
    re.compile(r'\bOD\d{15,21}\b'),  # Flipkart style
    re.compile(r'\b\d{12,18}\b'),  # Long numeric
    re.compile(r'\b[A-Z]{2,4}\d{10,20}\b'),  # Prefixed numeric
    re.compile(r'\b(?=[A-Z]{0,19}\d)[A-Z0-9]{8,20}\b'),  # Alphanumeric with a digit
]

DEFAULT_CONTENT_CHARS = 200000


def find_indicator(profile, sender: str, subject: str, content: str) -> Optional[str]:
    """Return the first indicator of a profile found in sender, subject or body."""
    for indicator in profile.indicators:
        if indicator in sender or indicator in subject or indicator in content:
            return indicator
    return None


def has_order_shaped_id(text: str) -> bool:
    return any(pattern.search(text) for pattern in ORDER_ID_SHAPES)


def detect_platform(
    email: InboundEmail,
    content: Optional[str] = None,
    profiles: Sequence = ALL_PROFILES,
) -> Optional[PlatformId]:
    """
    Classify an email.

    Args:
        email: Inbound email
        content: Prepared body text (computed from the email when omitted)
        profiles: Rule tables in priority order

    Returns:
        PlatformId of the first matching platform, PlatformId.GENERIC for an
        order-like email from an unknown sender, or None
    """
    if content is None:
        content = prepare_content(email.html_body, email.text_body, DEFAULT_CONTENT_CHARS)

    sender = email.sender.lower()
    subject = email.subject.lower()
    body = content.lower()

    generic_profile = None
    for profile in profiles:
        if profile.platform == PlatformId.GENERIC:
            generic_profile = profile
            continue
        indicator = find_indicator(profile, sender, subject, body)
        if indicator:
            logger.debug(
                f"Indicator matched: {indicator}",
                extra={'platform': profile.platform.value, 'message_id': email.provider_message_id},
            )
            return profile.platform

    if generic_profile is None:
        return None

    # Fallback gate: order-shaped id AND an order keyword
    if not has_order_shaped_id(f'{email.subject}\n{content}'):
        return None
    text = f'{subject}\n{body}'
    if not any(keyword in text for keyword in generic_profile.order_keywords):
        return None
    return PlatformId.GENERIC
