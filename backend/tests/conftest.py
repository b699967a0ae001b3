"""Core test fixtures for the extraction engine tests.

Provides an InboundEmail factory, sample email loading and a registry
built from a fresh default configuration.
"""

from datetime import datetime
from pathlib import Path

import pytest

from mailorder.config import ExtractionConfig
from mailorder.models import InboundEmail
from mailorder.order_parsing.registry import build_registry

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "sample_emails"

RECEIVED_AT = datetime(2024, 3, 15, 10, 30)


# ============================================================================
# EMAIL FACTORIES
# ============================================================================


@pytest.fixture
def make_email():
    """Factory for InboundEmail with sensible defaults.

    Usage:
        email = make_email(sender="noreply@bigbasket.com", subject="...", text_body="...")
    """

    def _make_email(
        sender="",
        subject="",
        html_body="",
        text_body="",
        received_at=RECEIVED_AT,
        provider_message_id="msg-001",
    ):
        return InboundEmail(
            sender=sender,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
            received_at=received_at,
            provider_message_id=provider_message_id,
        )

    return _make_email


@pytest.fixture
def load_sample_email():
    """Load a sample email body from tests/fixtures/sample_emails."""

    def _load(filename):
        with open(FIXTURES_DIR / filename, encoding="utf-8") as f:
            return f.read()

    return _load


# ============================================================================
# ENGINE FIXTURES
# ============================================================================


@pytest.fixture
def config():
    """Default extraction configuration (no environment overrides)."""
    return ExtractionConfig()


@pytest.fixture
def registry(config):
    """Registry over every platform, built from the default configuration."""
    return build_registry(config=config)
