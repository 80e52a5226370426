"""Request/response contracts for the chat endpoints."""

from datetime import datetime

from pydantic import Field

from backend.legal_assistant.models.common import (
    ApiModel,
    Category,
    FeedbackTag,
    SessionStatus,
    SynthesisSource,
)
from backend.legal_assistant.models.documents import DocumentRef
from backend.legal_assistant.models.sessions import (
    MAX_MESSAGE_CHARS,
    ChatSession,
    SessionAnalytics,
)


class ChatMessageRequest(ApiModel):
    """Request body for POST /chat/message."""

    # The configured, usually tighter, limit is enforced by ChatService
    message: str = Field(
        ..., min_length=1, max_length=MAX_MESSAGE_CHARS, description="User question"
    )
    session_id: str | None = Field(None, description="Existing session to continue")
    category: Category | None = Field(None, description="Caller-selected legal category")


class TurnMetadata(ApiModel):
    """Diagnostics for one chat turn."""

    processing_time_ms: float
    documents_found: int
    source: SynthesisSource
    category: Category
    article_number: str | None = None


class ChatTurnResponse(ApiModel):
    """External response contract for one chat turn."""

    session_id: str
    message: str = Field(..., min_length=1)
    relevant_documents: list[DocumentRef] = Field(default_factory=list)
    confidence: int = Field(..., ge=0, le=95)
    timestamp: datetime
    metadata: TurnMetadata


class SessionSummary(ApiModel):
    """Session row for listings (no message bodies)."""

    session_id: str
    title: str
    category: Category
    status: SessionStatus
    created_at: datetime
    last_activity: datetime
    analytics: SessionAnalytics

    @classmethod
    def from_session(cls, session: ChatSession) -> "SessionSummary":
        return cls(
            session_id=session.session_id,
            title=session.title,
            category=session.category,
            status=session.status,
            created_at=session.created_at,
            last_activity=session.last_activity,
            analytics=session.analytics,
        )


class Pagination(ApiModel):
    """Pagination block for listings."""

    current: int
    pages: int
    total: int


class SessionListResponse(ApiModel):
    """Response for GET /chat/sessions."""

    data: list[SessionSummary]
    pagination: Pagination


class RateSessionRequest(ApiModel):
    """Request body for POST /chat/sessions/{id}/rate."""

    rating: int = Field(..., ge=1, le=5)
    comment: str = Field("", max_length=1000)
    categories: list[FeedbackTag] = Field(default_factory=list)


class CategoryListResponse(ApiModel):
    """Response for GET /chat/categories."""

    categories: list[str]
