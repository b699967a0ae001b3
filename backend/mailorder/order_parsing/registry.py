"""
Parser Registry

Static, closed table mapping PlatformId -> OrderExtractor, built once from
ALL_PROFILES when this module is imported. Construction validates every
rule table and raises RuleTableError for malformed tables; lookups never
raise.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Union

from mailorder.config import ExtractionConfig, load_extraction_config
from mailorder.error_tracking import RuleTableError
from mailorder.logging_config import configure_logging, get_logger
from mailorder.models import (
    COURIER_LIFECYCLE,
    ORDER_LIFECYCLE,
    TERMINAL_STATUSES,
    OrderStatus,
    PlatformCategory,
    PlatformId,
)
from mailorder.order_parsers import ALL_PROFILES

from .extractor import OrderExtractor
from .toolkit import has_unbounded_quantifier

logger = get_logger(__name__)

# Statuses a status map may produce, per lifecycle
RETAIL_STATUSES = frozenset(ORDER_LIFECYCLE) | TERMINAL_STATUSES
COURIER_STATUSES = frozenset(COURIER_LIFECYCLE) | {OrderStatus.EXCEPTION}


def _as_platform(platform: Union[PlatformId, str, None]) -> Optional[PlatformId]:
    if isinstance(platform, PlatformId):
        return platform
    try:
        return PlatformId(str(platform).lower())
    except ValueError:
        return None


def validate_profiles(profiles: Iterable, config: ExtractionConfig) -> None:
    """
    Check static rule tables.

    Raises:
        RuleTableError: duplicate platform, missing indicators or id rules,
            unknown amount category, a status outside the
            platform's lifecycle, or an unbounded quantifier in any pattern
    """
    seen = set()
    for profile in profiles:
        name = profile.platform.value
        if profile.platform in seen:
            raise RuleTableError(name, "duplicate platform id")
        seen.add(profile.platform)

        if profile.platform == PlatformId.UNKNOWN:
            raise RuleTableError(name, "the unknown tag cannot be registered")
        if not profile.indicators and profile.platform != PlatformId.GENERIC:
            raise RuleTableError(name, "profile has no indicators")
        if not profile.order_id_rules:
            raise RuleTableError(name, "profile has no identifier rules")
        if profile.amount_category not in config.amount_ceilings:
            raise RuleTableError(name, f"unknown amount category: {profile.amount_category}")

        lifecycle, allowed = ("courier", COURIER_STATUSES) if profile.is_courier else ("order", RETAIL_STATUSES)
        statuses = set(profile.status_map.values()) | {override.status for override in profile.status_overrides}
        stray = sorted(status.value for status in statuses - allowed)
        if stray:
            raise RuleTableError(name, f"status outside the {lifecycle} lifecycle: {', '.join(stray)}")

        for rule in profile.all_rules():
            if has_unbounded_quantifier(rule.pattern):
                raise RuleTableError(name, f"rule '{rule.name}' uses an unbounded quantifier")


class ParserRegistry:
    """Read-only PlatformId -> OrderExtractor table in classifier priority order."""

    def __init__(self, extractors: Mapping[PlatformId, OrderExtractor], config: ExtractionConfig):
        self._extractors = MappingProxyType(dict(extractors))
        self.config = config

    def __len__(self):
        return len(self._extractors)

    def __contains__(self, platform):
        return self.is_platform_supported(platform)

    @property
    def profiles(self) -> tuple:
        return tuple(extractor.profile for extractor in self._extractors.values())

    def get_extractor(self, platform) -> Optional[OrderExtractor]:
        platform = _as_platform(platform)
        if platform is None:
            return None
        return self._extractors.get(platform)

    def is_platform_supported(self, platform) -> bool:
        return self.get_extractor(platform) is not None

    def available_platforms(self) -> List[str]:
        return [platform.value for platform in self._extractors]

    def platform_category(self, platform) -> Optional[PlatformCategory]:
        extractor = self.get_extractor(platform)
        return extractor.profile.category if extractor else None

    def platforms_by_category(self) -> Dict[str, List[str]]:
        grouped = {category.value: [] for category in PlatformCategory}
        for platform, extractor in self._extractors.items():
            grouped[extractor.profile.category.value].append(platform.value)
        return grouped

    def parser_stats(self) -> dict:
        """Registered platform counts, total and per category."""
        grouped = self.platforms_by_category()
        return {
            'total_platforms': len(self._extractors),
            'categories': {category: len(platforms) for category, platforms in grouped.items()},
            'platforms': self.available_platforms(),
        }


def build_registry(profiles: Iterable = ALL_PROFILES, config: Optional[ExtractionConfig] = None) -> ParserRegistry:
    """Validate rule tables and bind one extractor per platform."""
    profiles = tuple(profiles)
    config = config or ExtractionConfig()
    validate_profiles(profiles, config)
    registry = ParserRegistry(
        {profile.platform: OrderExtractor(profile, config) for profile in profiles},
        config,
    )
    logger.debug(f"Registered {len(registry)} platform parsers")
    return registry


DEFAULT_CONFIG = load_extraction_config()
configure_logging(DEFAULT_CONFIG.log_level, DEFAULT_CONFIG.log_dir)

PARSER_REGISTRY = build_registry(ALL_PROFILES, DEFAULT_CONFIG)


def get_extractor(platform) -> Optional[OrderExtractor]:
    return PARSER_REGISTRY.get_extractor(platform)


def is_platform_supported(platform) -> bool:
    return PARSER_REGISTRY.is_platform_supported(platform)


def available_platforms() -> List[str]:
    return PARSER_REGISTRY.available_platforms()


def platforms_by_category() -> Dict[str, List[str]]:
    return PARSER_REGISTRY.platforms_by_category()


def parser_stats() -> dict:
    return PARSER_REGISTRY.parser_stats()


def platform_category(platform) -> Optional[PlatformCategory]:
    return PARSER_REGISTRY.platform_category(platform)
