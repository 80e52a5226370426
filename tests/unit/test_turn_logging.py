"""Unit tests for structured chat-turn logging."""

import logging

import pytest

from backend.legal_assistant.models.common import Category, SynthesisSource
from backend.legal_assistant.utils.logging import StructuredTurnLogger


def log_turn(source: SynthesisSource, article_number: str | None = "27") -> None:
    StructuredTurnLogger().log_turn(
        session_id="s-1",
        category=Category.administrative,
        article_number=article_number,
        documents_found=2,
        source=source,
        confidence=90,
        latency_ms=12.5,
    )


def test_generated_turn_logged_at_info(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="backend.legal_assistant.utils.logging"):
        log_turn(SynthesisSource.llm)

    record = caplog.records[-1]
    assert record.levelno == logging.INFO
    assert record.structured == {
        "session_id": "s-1",
        "category": "Administrative Law",
        "documents_found": 2,
        "source": "llm",
        "confidence": 90,
        "latency_ms": 12.5,
        "article_number": "27",
    }


def test_fallback_turn_logged_as_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="backend.legal_assistant.utils.logging"):
        log_turn(SynthesisSource.fallback, article_number=None)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert "article_number" not in record.structured
