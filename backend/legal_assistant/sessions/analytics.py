"""Session analytics derived from the message list."""

from backend.legal_assistant.models.sessions import Message, SessionAnalytics


def compute_analytics(messages: list[Message]) -> SessionAnalytics:
    """Recompute analytics from scratch; pure function of ``messages``."""
    if not messages:
        return SessionAnalytics()

    tokens = 0
    response_times: list[float] = []
    confidences: list[int] = []

    for message in messages:
        metadata = message.metadata
        if metadata is None:
            continue
        tokens += metadata.tokens or 0
        if metadata.processing_time_ms is not None:
            response_times.append(metadata.processing_time_ms)
        if metadata.confidence is not None:
            confidences.append(metadata.confidence)

    duration = messages[-1].timestamp - messages[0].timestamp

    return SessionAnalytics(
        total_messages=len(messages),
        total_tokens=tokens,
        average_response_time_ms=(
            sum(response_times) / len(response_times) if response_times else 0.0
        ),
        session_duration_ms=duration.total_seconds() * 1000,
        average_confidence=sum(confidences) / len(confidences) if confidences else None,
    )
