"""
Order Parsing Package

Modular extraction engine for transactional order emails.

Modules:
- utilities: content normalization, currency / amount / date helpers
- toolkit: cascade evaluation, amount voting, validators, deduplication
- filtering: per-platform canHandle gate
- classifier: platform detection
- extractor: generic rule-table extractor
- confidence: weighted confidence scoring
- normalizer: OrderDraft assembly
- registry: static PlatformId -> extractor table
- orchestrator: extract_order() entry point
"""

from .classifier import detect_platform
from .orchestrator import extract_order, extract_with_trace
from .registry import (
    PARSER_REGISTRY,
    available_platforms,
    build_registry,
    get_extractor,
    is_platform_supported,
    parser_stats,
    platform_category,
    platforms_by_category,
)
from .utilities import clean_html, extract_text_content

__all__ = [
    'PARSER_REGISTRY',
    'available_platforms',
    'build_registry',
    'clean_html',
    'detect_platform',
    'extract_order',
    'extract_text_content',
    'extract_with_trace',
    'get_extractor',
    'is_platform_supported',
    'parser_stats',
    'platform_category',
    'platforms_by_category',
]
