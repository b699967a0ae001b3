"""
Order Parsers - Declarative Per-Platform Rule Tables

This package contains one PlatformProfile per supported platform, grouped by
category:
- ecommerce.py: Amazon, Flipkart, Myntra, AJIO, Meesho, Tata CLiQ, FirstCry,
  Paytm Mall, Snapdeal, Reliance Digital
- quick_delivery.py: Swiggy, Blinkit, BigBasket, Zepto, Domino's
- logistics.py: Delhivery, Ecom Express, Aramex, Xpressbees, TCI Express,
  Safexpress, Gati, Blue Dart, DTDC, FedEx, India Post
- specialized.py: Ekart and the generic fallback

Usage:
    from mailorder.order_parsers import ALL_PROFILES

ALL_PROFILES is listed in classifier priority order (ecommerce, quick
delivery, logistics, specialized) and is the only registration point: the
registry is built from it once, at import time.
"""

from . import ecommerce
from . import logistics
from . import quick_delivery
from . import specialized
from .base import PlatformProfile

ALL_PROFILES = (
    ecommerce.PROFILES
    + quick_delivery.PROFILES
    + logistics.PROFILES
    + specialized.PROFILES
)

__all__ = [
    'ALL_PROFILES',
    'PlatformProfile',
]
