"""Structured logging for chat turns."""

import logging
from typing import Any

from backend.legal_assistant.models.common import Category, SynthesisSource

logger = logging.getLogger(__name__)


class StructuredTurnLogger:
    """Structured logger for answered chat turns."""

    def log_turn(
        self,
        *,
        session_id: str,
        category: Category,
        article_number: str | None,
        documents_found: int,
        source: SynthesisSource,
        confidence: int,
        latency_ms: float,
    ) -> None:
        """Log one answered turn with structured data."""
        log_data: dict[str, Any] = {
            "session_id": session_id,
            "category": category.value,
            "documents_found": documents_found,
            "source": source.value,
            "confidence": confidence,
            "latency_ms": round(latency_ms, 2),
        }

        if article_number:
            log_data["article_number"] = article_number

        log_msg = f"Chat turn: session_id={session_id} - {source.value}"

        if source == SynthesisSource.llm:
            logger.info(log_msg, extra={"structured": log_data})
        else:
            # Degraded answer, generation service was unavailable
            logger.warning(log_msg, extra={"structured": log_data})
