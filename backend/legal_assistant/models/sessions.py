"""Chat session domain models."""

from datetime import datetime

from pydantic import ConfigDict, Field

from backend.legal_assistant.models.common import (
    ApiModel,
    Category,
    FeedbackTag,
    MessageRole,
    SessionStatus,
    SynthesisSource,
)

# Longest text a single stored message may hold
MAX_MESSAGE_CHARS = 10000

class MessageMetadata(ApiModel):
    """Timing and grounding details attached to a message."""

    model_config = ConfigDict(frozen=True)

    confidence: int | None = Field(None, ge=0, le=95)
    processing_time_ms: float | None = Field(None, ge=0)
    tokens: int | None = Field(None, ge=0)
    model: str | None = None
    source: SynthesisSource | None = None


class Message(ApiModel):
    """Single message; owned by its session and never edited after append."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str = Field(..., min_length=1, max_length=MAX_MESSAGE_CHARS)
    timestamp: datetime
    metadata: MessageMetadata | None = None
    # Document ids only; documents are looked up, never embedded
    relevant_documents: list[str] = Field(default_factory=list)


class SessionAnalytics(ApiModel):
    """Derived per-session statistics, recomputed from the message list."""

    total_messages: int = 0
    total_tokens: int = 0
    average_response_time_ms: float = 0.0
    session_duration_ms: float = 0.0
    average_confidence: float | None = None


class SessionFeedback(ApiModel):
    """User rating of a session."""

    rating: int = Field(..., ge=1, le=5)
    comment: str = Field("", max_length=1000)
    categories: list[FeedbackTag] = Field(default_factory=list)
    rated_at: datetime


class ChatSession(ApiModel):
    """One conversation: an append-only ordered list of messages owned by a user."""

    session_id: str
    user_id: str
    title: str = Field(..., max_length=200)
    category: Category = Category.general
    status: SessionStatus = SessionStatus.active
    messages: list[Message] = Field(default_factory=list)
    analytics: SessionAnalytics = Field(default_factory=SessionAnalytics)
    feedback: SessionFeedback | None = None
    created_at: datetime
    last_activity: datetime
    completed_at: datetime | None = None

    def recent_messages(self, limit: int = 10) -> list[Message]:
        """Return the last ``limit`` messages in chronological order."""
        if limit <= 0:
            return []
        return self.messages[-limit:]
