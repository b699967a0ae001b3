"""
Order Extraction Orchestrator

Main entry point for turning one inbound email into an OrderDraft.
Orchestrates the flow: prepare content -> classify -> registry lookup ->
platform extractor (gate, cascades, scoring, normalization).

Extraction is best-effort: input-driven failures come back as None with
the reason recorded in the per-call ExtractionTrace, and unexpected
exceptions are logged and degraded to None. Nothing here raises for a
malformed email.
"""

from typing import Optional, Tuple

from mailorder.error_tracking import ExtractionError, ExtractionOutcome, ExtractionStage
from mailorder.logging_config import get_logger
from mailorder.models import ExtractionTrace, InboundEmail, OrderDraft

from .classifier import detect_platform
from .registry import PARSER_REGISTRY, ParserRegistry
from .utilities import prepare_content

logger = get_logger(__name__)


def extract_with_trace(
    email: InboundEmail,
    registry: Optional[ParserRegistry] = None,
) -> Tuple[Optional[OrderDraft], ExtractionTrace]:
    """
    Extract an order and return the trace of how it was decided.

    Args:
        email: Inbound email
        registry: Parser registry (defaults to the process-wide registry)

    Returns:
        Tuple of (OrderDraft or None, ExtractionTrace)
    """
    if registry is None:
        registry = PARSER_REGISTRY
    trace = ExtractionTrace(message_id=email.provider_message_id)
    context = {'message_id': email.provider_message_id}

    try:
        trace.begin(ExtractionStage.CLASSIFY.value)
        content = prepare_content(email.html_body, email.text_body, registry.config.max_content_chars)
        platform = detect_platform(email, content=content, profiles=registry.profiles)
        if platform is None:
            trace.record(ExtractionStage.CLASSIFY.value, 'No platform matched')
            trace.outcome = ExtractionOutcome.NO_PLATFORM_MATCH.value
            logger.debug("No platform matched", extra=context)
            return None, trace

        trace.platform = platform
        context['platform'] = platform.value
        trace.record(ExtractionStage.CLASSIFY.value, platform.value)

        extractor = registry.get_extractor(platform)
        if extractor is None:
            trace.outcome = ExtractionOutcome.NO_PLATFORM_MATCH.value
            return None, trace

        draft = extractor.extract(email, trace=trace, content=content)
        return draft, trace

    except Exception as e:
        stage = _stage_of(trace)
        error = ExtractionError.from_exception(e, stage, context=context)
        error.log()
        trace.record(stage.value, error.message)
        trace.outcome = error.outcome.value
        return None, trace


def extract_order(email: InboundEmail, registry: Optional[ParserRegistry] = None) -> Optional[OrderDraft]:
    """
    Extract an OrderDraft from an email.

    Returns:
        OrderDraft, or None when the email is declined or not an order
    """
    draft, _ = extract_with_trace(email, registry)
    return draft


def _stage_of(trace: ExtractionTrace) -> ExtractionStage:
    try:
        return ExtractionStage(trace.stage)
    except ValueError:
        return ExtractionStage.CLASSIFY
