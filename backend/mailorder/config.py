"""
Extraction Configuration Management
Handles environment variables, validation, and per-category amount bounds
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from mailorder.logging_config import DEFAULT_LOG_LEVEL

ENV_PREFIX = "MAILORDER_"

# Plausibility bounds per amount category (INR)
DEFAULT_AMOUNT_CEILINGS = {
    "grocery": 50000.0,
    "food": 10000.0,
    "value_retail": 100000.0,
    "retail": 1000000.0,
    "courier": 100000.0,
}

DEFAULT_AMOUNT_FLOORS = {
    "grocery": 10.0,
    "food": 0.0,
    "value_retail": 0.0,
    "retail": 0.0,
    "courier": 0.0,
}

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _default_env_path() -> Path:
    return Path(__file__).parent.parent / ".env"


@dataclass
class ExtractionConfig:
    """Extraction engine configuration object"""
    currency: str = "INR"
    amount_ceilings: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_AMOUNT_CEILINGS))
    amount_floors: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_AMOUNT_FLOORS))
    max_items: int = 10
    max_content_chars: int = 200000
    log_level: str = DEFAULT_LOG_LEVEL
    log_dir: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization"""
        self.validate()

    def validate(self):
        """Validate extraction configuration"""
        if not self.currency or len(self.currency) != 3:
            raise ValueError(f"Invalid currency code: {self.currency!r}")

        if self.max_items <= 0:
            raise ValueError("MAILORDER_MAX_ITEMS must be greater than 0")

        if self.max_content_chars <= 0:
            raise ValueError("MAILORDER_MAX_CONTENT_CHARS must be greater than 0")

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        missing = set(DEFAULT_AMOUNT_CEILINGS) - set(self.amount_ceilings)
        if missing:
            raise ValueError(f"Missing amount ceilings for: {', '.join(sorted(missing))}")

        for category, ceiling in self.amount_ceilings.items():
            if ceiling <= 0:
                raise ValueError(f"Amount ceiling for {category} must be greater than 0")
            floor = self.amount_floors.get(category, 0.0)
            if floor < 0:
                raise ValueError(f"Amount floor for {category} must be non-negative")
            if floor >= ceiling:
                raise ValueError(
                    f"Amount floor for {category} ({floor}) must be below its ceiling ({ceiling})"
                )

    def amount_bounds(self, category: str) -> tuple:
        """Return (floor, ceiling) for an amount category."""
        if category not in self.amount_ceilings:
            raise KeyError(f"Unknown amount category: {category}")
        return self.amount_floors.get(category, 0.0), self.amount_ceilings[category]


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def load_extraction_config(env_path: Optional[Path] = None) -> ExtractionConfig:
    """
    Load extraction configuration from environment variables.

    Environment Variables:
    - MAILORDER_CURRENCY: ISO currency code (default: INR)
    - MAILORDER_AMOUNT_CEILING_<CATEGORY>: plausibility ceiling per amount
      category (grocery, food, value_retail, retail, courier)
    - MAILORDER_AMOUNT_FLOOR_<CATEGORY>: plausibility floor per category
    - MAILORDER_MAX_ITEMS: maximum line items per order (default: 10)
    - MAILORDER_MAX_CONTENT_CHARS: body truncation limit (default: 200000)
    - MAILORDER_LOG_LEVEL: console log level (default: WARNING)
    - MAILORDER_LOG_DIR: enables rotating file logs when set

    Returns:
        ExtractionConfig object

    Raises:
        ValueError: if any override is malformed or out of range
    """
    env_path = env_path or _default_env_path()
    if env_path.exists():
        load_dotenv(env_path)

    ceilings = {
        category: _float_env(f"{ENV_PREFIX}AMOUNT_CEILING_{category.upper()}", default)
        for category, default in DEFAULT_AMOUNT_CEILINGS.items()
    }
    floors = {
        category: _float_env(f"{ENV_PREFIX}AMOUNT_FLOOR_{category.upper()}", default)
        for category, default in DEFAULT_AMOUNT_FLOORS.items()
    }

    return ExtractionConfig(
        currency=os.getenv(f"{ENV_PREFIX}CURRENCY", "INR").strip().upper(),
        amount_ceilings=ceilings,
        amount_floors=floors,
        max_items=_int_env(f"{ENV_PREFIX}MAX_ITEMS", 10),
        max_content_chars=_int_env(f"{ENV_PREFIX}MAX_CONTENT_CHARS", 200000),
        log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper(),
        log_dir=os.getenv(f"{ENV_PREFIX}LOG_DIR") or None,
    )
