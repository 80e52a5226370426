"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from backend.legal_assistant.models.common import Category, SessionStatus
from backend.legal_assistant.models.documents import Article, LegalDocument
from backend.legal_assistant.models.sessions import ChatSession
from backend.legal_assistant.retrieval.query import DocumentQuery


@dataclass
class SessionPage:
    """One page of a user's sessions."""

    sessions: list[ChatSession]
    total: int


class DocumentStore(Protocol):
    """Read-mostly store of legal documents."""

    async def find(self, query: DocumentQuery) -> list[LegalDocument]:
        """Run a disjunctive clause query.

        Args:
            query: Clauses, optional category restriction and result limit

        Returns:
            Matching documents ordered by first satisfied clause, then by
            insertion order, truncated to ``query.limit``

        Raises:
            DocumentStoreError: If the backing store fails
        """
        ...

    async def get(self, document_id: str) -> LegalDocument | None:
        """Get a document by id.

        Args:
            document_id: Document ID

        Returns:
            Document or None if not found
        """
        ...

    async def get_article(self, document_id: str, number: str) -> Article | None:
        """Point lookup of an article by exact number within a document.

        Args:
            document_id: Document ID
            number: Canonical article number

        Returns:
            Article or None if the document or article is absent
        """
        ...

    async def increment_usage(self, document_id: str, article_number: str | None = None) -> None:
        """Record that a document was surfaced to a user.

        Args:
            document_id: Document ID
            article_number: Article the user asked for, if any
        """
        ...


class SessionStore(Protocol):
    """Store for chat session documents (whole-document load/persist)."""

    async def load(self, session_id: str, user_id: str) -> ChatSession | None:
        """Load a session owned by ``user_id``.

        Args:
            session_id: Session ID
            user_id: Owner (enforces ownership)

        Returns:
            Session or None if absent or owned by someone else

        Raises:
            SessionStoreError: If the backing store fails
        """
        ...

    async def save(self, session: ChatSession) -> None:
        """Persist the full session document (last write wins).

        Args:
            session: Session to persist

        Raises:
            SessionStoreError: If the backing store fails
        """
        ...

    async def list_for_user(
        self,
        user_id: str,
        *,
        status: SessionStatus | None = SessionStatus.active,
        category: Category | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> SessionPage:
        """List a user's sessions, most recent activity first.

        Args:
            user_id: Owner
            status: Status filter (None lists every status)
            category: Optional category filter
            page: 1-based page number
            limit: Page size

        Returns:
            Page of sessions plus the total matching count
        """
        ...


@dataclass
class RetryAfter:
    """Rate limit retry-after information."""

    seconds: int


class RateLimiter(Protocol):
    """Rate limiter interface."""

    async def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed
        """
        ...
