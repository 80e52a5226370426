"""Models package - re-exports for convenience."""

from backend.legal_assistant.models.chat import (
    CategoryListResponse,
    ChatMessageRequest,
    ChatTurnResponse,
    Pagination,
    RateSessionRequest,
    SessionListResponse,
    SessionSummary,
    TurnMetadata,
)
from backend.legal_assistant.models.common import (
    ApiModel,
    Category,
    DocumentType,
    FeedbackTag,
    MessageRole,
    SessionStatus,
    SynthesisSource,
)
from backend.legal_assistant.models.documents import Article, DocumentRef, LegalDocument, RelatedLaw
from backend.legal_assistant.models.sessions import (
    ChatSession,
    Message,
    MessageMetadata,
    SessionAnalytics,
    SessionFeedback,
)

__all__ = [
    # Common
    "ApiModel",
    "Category",
    "DocumentType",
    "FeedbackTag",
    "MessageRole",
    "SessionStatus",
    "SynthesisSource",
    # Documents
    "Article",
    "DocumentRef",
    "LegalDocument",
    "RelatedLaw",
    # Sessions
    "ChatSession",
    "Message",
    "MessageMetadata",
    "SessionAnalytics",
    "SessionFeedback",
    # Chat contracts
    "CategoryListResponse",
    "ChatMessageRequest",
    "ChatTurnResponse",
    "Pagination",
    "RateSessionRequest",
    "SessionListResponse",
    "SessionSummary",
    "TurnMetadata",
]
