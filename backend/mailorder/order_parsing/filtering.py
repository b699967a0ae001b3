"""
Order Email Filtering

canHandle gate run by every extractor before any field extraction.
A platform accepts an email only when the sender belongs to it, the
subject reads like an order notification and nothing marks the email as
promotional. A sender match alone is never sufficient.
"""

import re
from typing import Optional, Tuple

# Sender prefixes used for marketing mail (reject these even from known domains)
KNOWN_MARKETING_SENDERS = [
    'marketing@', 'promo@', 'newsletter@', 'deals@', 'offers@',
    'promotions@', 'campaign@', 'store-news@', 'recommendations@',
]

# "50% off", "10 % OFF"
PERCENT_OFF = re.compile(r'\d{1,3}\s{0,2}%\s{0,2}off\b', re.IGNORECASE)

# Product names quoted in the subject, or named in "order for X has been ..."
PRODUCT_SEGMENT = re.compile(
    r'"[^"\n]{1,150}"|“[^”\n]{1,150}”'
    r'|\border\s{1,3}(?:of|for)\s{1,3}[^\n]{3,150}?(?=\s{1,3}(?:has|have|is|are|was|were)\s{1,3}been\b)',
    re.IGNORECASE,
)


def _keyword_pattern(keyword: str) -> re.Pattern:
    return re.compile(rf'\b{re.escape(keyword)}(?:s|es)?\b', re.IGNORECASE)


def find_promotional_keyword(text: str, keywords) -> Optional[str]:
    """Return the first promotional keyword present as a whole word."""
    if not text:
        return None
    if PERCENT_OFF.search(text):
        return '% off'
    for keyword in keywords:
        if _keyword_pattern(keyword).search(text):
            return keyword
    return None


def strip_product_segments(subject: str) -> str:
    """Drop product names from a subject so they never read as promotional."""
    return PRODUCT_SEGMENT.sub(' ', subject or '')


def is_marketing_sender(sender: str) -> Optional[str]:
    sender_lower = (sender or '').lower()
    for prefix in KNOWN_MARKETING_SENDERS:
        if prefix in sender_lower:
            return prefix
    return None


def check_can_handle(profile, email) -> Tuple[bool, str]:
    """
    Platform-specific receipt gate.

    Args:
        profile: PlatformProfile of the candidate platform
        email: InboundEmail

    Returns:
        Tuple of (accepted: bool, reason: str)
    """
    sender_lower = email.sender.lower()
    subject_lower = email.subject.lower()

    marketing_prefix = is_marketing_sender(sender_lower)
    if marketing_prefix:
        return (False, f'Marketing sender: {marketing_prefix}')

    if profile.sender_domains:
        sender_markers = tuple(profile.sender_domains) + tuple(profile.indicators)
        if not any(marker in sender_lower for marker in sender_markers):
            return (False, f'Sender not recognised for {profile.platform.value}')
        keyword_text = subject_lower
    else:
        # No sender allow-list: keywords may come from sender or subject
        keyword_text = f'{sender_lower} {subject_lower}'

    if not any(keyword in keyword_text for keyword in profile.order_keywords):
        return (False, 'No order keyword in subject')

    promotional = find_promotional_keyword(
        strip_product_segments(email.subject), profile.reject_keywords
    )
    if promotional:
        return (False, f'Promotional subject: {promotional}')

    return (True, f'{profile.display_name} transactional email')


def can_handle(profile, email) -> bool:
    accepted, _ = check_can_handle(profile, email)
    return accepted
