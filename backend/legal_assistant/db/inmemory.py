"""In-memory implementations of repository interfaces."""

import math
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone

from backend.legal_assistant.db.repositories import RetryAfter, SessionPage
from backend.legal_assistant.models.common import Category, SessionStatus
from backend.legal_assistant.models.documents import Article, LegalDocument
from backend.legal_assistant.models.sessions import ChatSession
from backend.legal_assistant.retrieval.query import DocumentQuery, QueryClause, SearchField


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clause_matches(clause: QueryClause, document: LegalDocument) -> bool:
    """Evaluate one clause against a document."""
    if clause.field == SearchField.title:
        return clause.matches(document.title)
    if clause.field == SearchField.title_arabic:
        return clause.matches(document.title_arabic)
    if clause.field == SearchField.summary:
        return clause.matches(document.summary)
    if clause.field == SearchField.article_title:
        return any(clause.matches(a.title) for a in document.articles)
    if clause.field == SearchField.article_content:
        return any(clause.matches(a.content) for a in document.articles)
    if clause.field == SearchField.article_number:
        return any(clause.matches(a.number) for a in document.articles)
    return False


class InMemoryDocumentStore:
    """In-memory implementation of DocumentStore."""

    def __init__(
        self,
        documents: Iterable[LegalDocument] = (),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._documents: dict[str, LegalDocument] = {}
        self._clock = clock
        for document in documents:
            self.add(document)

    def add(self, document: LegalDocument) -> None:
        """Insert or replace a document (ingestion hook for tests and seeding)."""
        for existing in self._documents.values():
            if (
                existing.official_number == document.official_number
                and existing.document_id != document.document_id
            ):
                raise ValueError(f"Duplicate official number: {document.official_number}")
        self._documents[document.document_id] = document

    async def find(self, query: DocumentQuery) -> list[LegalDocument]:
        """Run a disjunctive clause query."""
        ranked: list[tuple[int, int, LegalDocument]] = []

        for position, document in enumerate(self._documents.values()):
            if query.category is not None and document.category != query.category:
                continue

            for index, clause in enumerate(query.clauses):
                if clause_matches(clause, document):
                    ranked.append((index, position, document))
                    break

        ranked.sort(key=lambda x: (x[0], x[1]))
        return [document for _, _, document in ranked[: query.limit]]

    async def get(self, document_id: str) -> LegalDocument | None:
        """Get a document by id."""
        return self._documents.get(document_id)

    async def get_article(self, document_id: str, number: str) -> Article | None:
        """Point lookup of an article by exact number."""
        document = self._documents.get(document_id)
        if document is None:
            return None
        return document.find_article(number)

    async def increment_usage(self, document_id: str, article_number: str | None = None) -> None:
        """Record that a document was surfaced to a user."""
        document = self._documents.get(document_id)
        if document is None:
            return

        popular = dict(document.popular_articles)
        if article_number and document.find_article(article_number) is not None:
            popular[article_number] = popular.get(article_number, 0) + 1

        self._documents[document_id] = document.model_copy(
            update={
                "usage_count": document.usage_count + 1,
                "last_queried": self._clock(),
                "popular_articles": popular,
            }
        )


class InMemorySessionStore:
    """In-memory implementation of SessionStore.

    Stores deep copies so callers never share a live session object, matching
    the load/persist-whole-document semantics of a real store.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, ChatSession] = {}

    async def load(self, session_id: str, user_id: str) -> ChatSession | None:
        """Load a session owned by user_id."""
        session = self._sessions.get(session_id)

        if session is None:
            return None

        # Enforce ownership
        if session.user_id != user_id:
            return None

        return session.model_copy(deep=True)

    async def save(self, session: ChatSession) -> None:
        """Persist the full session document (last write wins)."""
        self._sessions[session.session_id] = session.model_copy(deep=True)

    async def list_for_user(
        self,
        user_id: str,
        *,
        status: SessionStatus | None = SessionStatus.active,
        category: Category | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> SessionPage:
        """List a user's sessions, most recent activity first."""
        results = [
            s
            for s in self._sessions.values()
            if s.user_id == user_id
            and (status is None or s.status == status)
            and (category is None or s.category == category)
        ]
        results.sort(key=lambda s: s.last_activity, reverse=True)

        start = (max(page, 1) - 1) * limit
        return SessionPage(
            sessions=[s.model_copy(deep=True) for s in results[start : start + limit]],
            total=len(results),
        )


class InMemoryRateLimiter:
    """In-memory implementation of RateLimiter using fixed window."""

    def __init__(self, max_requests: int, window_seconds: int = 60) -> None:
        """Initialize rate limiter.

        Args:
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default 60)
        """
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._windows: dict[str, tuple[datetime, int]] = {}

    async def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available."""
        window = self._windows.get(key)

        if window is None or now >= window[0] + timedelta(seconds=self._window_seconds):
            # First request or expired window
            self._windows[key] = (now, 1)
            return None

        window_start, count = window
        if count >= self._max_requests:
            remaining = (window_start + timedelta(seconds=self._window_seconds) - now).total_seconds()
            return RetryAfter(seconds=max(1, math.ceil(remaining)))

        self._windows[key] = (window_start, count + 1)
        return None
