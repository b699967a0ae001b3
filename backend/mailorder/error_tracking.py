"""Structured error tracking with automatic classification.

This module provides error tracking for the extraction engine with:
- Classification of each failure by pipeline stage and outcome
- Integration with structured logging
- A distinct error for malformed static rule tables (raised at startup only)

Usage:
    from mailorder.error_tracking import ExtractionError, ExtractionStage

    try:
        extractor.extract(email)
    except Exception as e:
        error = ExtractionError.from_exception(
            e, ExtractionStage.AMOUNT, context={'platform': 'amazon'}
        )
        error.log()
"""

import traceback
from enum import Enum
from typing import Any

from mailorder.logging_config import get_logger

logger = get_logger(__name__)


class ExtractionStage(Enum):
    """Pipeline stage in which an extraction decision or fault occurred."""

    CLASSIFY = "classify"  # Platform detection
    GATE = "gate"  # can_handle keyword / promotional gate
    ORDER_ID = "order_id"  # Identifier cascade
    AMOUNT = "amount"  # Amount voting
    ITEMS = "items"  # Item tiers and dedup
    DATE = "date"  # Order date resolution
    STATUS = "status"  # Email type and status mapping
    METADATA = "metadata"  # Tracking, seller, delivery window, details
    CONFIDENCE = "confidence"  # Scoring
    NORMALIZE = "normalize"  # OrderDraft assembly


class ExtractionOutcome(Enum):
    """Outcome of a single extract() call."""

    EXTRACTED = "extracted"  # Complete draft
    NO_PLATFORM_MATCH = "no_platform_match"  # Classifier found nothing eligible
    DECLINED = "declined"  # can_handle rejected the email
    NO_IDENTIFIER = "no_identifier"  # Platform matched but no valid id
    PARTIAL_EXTRACTION = "partial_extraction"  # Draft with unavailable fields
    INTERNAL_FAULT = "internal_fault"  # Unexpected exception, degraded to None


class RuleTableError(ValueError):
    """Raised when a static platform rule table is malformed."""

    def __init__(self, platform: str, message: str):
        self.platform = platform
        super().__init__(f"[{platform}] {message}")


class ExtractionError:
    """Structured extraction fault with logging.

    Attributes:
        stage: Pipeline stage where the fault occurred
        outcome: Outcome reported to the caller
        message: Human-readable error message
        exception: Original exception (if any)
        context: Additional context (platform, message_id, rule, etc.)
        stack_trace: Full stack trace string
    """

    def __init__(
        self,
        stage: ExtractionStage,
        outcome: ExtractionOutcome,
        message: str,
        exception: Exception | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.stage = stage
        self.outcome = outcome
        self.message = message
        self.exception = exception
        self.context = context or {}
        self.stack_trace = None

        if exception:
            self.stack_trace = "".join(
                traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                )
            )

    def log(self) -> None:
        """Log the fault with its structured context."""
        logger.error(
            f"[{self.stage.value}] {self.message}",
            extra={
                "platform": self.context.get("platform"),
                "message_id": self.context.get("message_id"),
                "rule": self.context.get("rule"),
            },
            exc_info=self.exception,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage.value,
            "outcome": self.outcome.value,
            "message": self.message,
            "exception_type": type(self.exception).__name__ if self.exception else None,
            "context": dict(self.context),
        }

    @classmethod
    def from_exception(
        cls,
        exception: Exception,
        stage: ExtractionStage,
        context: dict[str, Any] | None = None,
    ) -> "ExtractionError":
        """Build an error from an exception raised during extraction.

        Any exception escaping a stage is an internal fault: input-driven
        failures are expressed as outcomes, never raised.

        Args:
            exception: Exception object to wrap
            stage: Stage where the exception occurred
            context: Additional context dict

        Returns:
            ExtractionError with outcome INTERNAL_FAULT
        """
        exception_name = type(exception).__name__
        message = str(exception) or exception_name
        return cls(
            stage=stage,
            outcome=ExtractionOutcome.INTERNAL_FAULT,
            message=f"{exception_name}: {message}",
            exception=exception,
            context=context,
        )


def classify_outcome(draft) -> ExtractionOutcome:
    """Classify an extraction result for statistics tracking.

    Args:
        draft: OrderDraft or None

    Returns:
        EXTRACTED when every field was found, PARTIAL_EXTRACTION when the
        draft carries unavailable sentinels, NO_IDENTIFIER for None
    """
    if draft is None:
        return ExtractionOutcome.NO_IDENTIFIER

    if draft.extraction_metadata.missing_fields:
        return ExtractionOutcome.PARTIAL_EXTRACTION
    return ExtractionOutcome.EXTRACTED
