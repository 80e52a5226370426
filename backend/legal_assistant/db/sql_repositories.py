"""SQL implementations of repository interfaces."""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import ColumnElement, case, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.legal_assistant.db.models import StoredArticle, StoredDocument, StoredSession
from backend.legal_assistant.db.repositories import SessionPage
from backend.legal_assistant.errors import DocumentStoreError, SessionStoreError
from backend.legal_assistant.models.common import Category, SessionStatus
from backend.legal_assistant.models.documents import Article, LegalDocument, RelatedLaw
from backend.legal_assistant.models.sessions import ChatSession
from backend.legal_assistant.retrieval.query import DocumentQuery, QueryClause, SearchField


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_article(row: StoredArticle) -> Article:
    return Article(number=row.number, title=row.title, content=row.content, keywords=row.keywords)


def _to_document(row: StoredDocument) -> LegalDocument:
    return LegalDocument(
        document_id=row.document_id,
        title=row.title,
        title_arabic=row.title_arabic,
        category=Category(row.category),
        type=row.type,
        official_number=row.official_number,
        summary=row.summary,
        articles=[_to_article(a) for a in row.articles],
        related_laws=[RelatedLaw.model_validate(r) for r in row.related_laws],
        usage_count=row.usage_count,
        last_queried=row.last_queried,
        popular_articles=row.popular_articles,
    )


def _text_condition(column: Any, clause: QueryClause) -> ColumnElement[bool]:
    if clause.exact:
        return column == clause.value
    return column.icontains(clause.value, autoescape=True)


def clause_condition(clause: QueryClause) -> ColumnElement[bool]:
    """Translate one clause into a SQL boolean expression."""
    if clause.field == SearchField.title:
        return _text_condition(StoredDocument.title, clause)
    if clause.field == SearchField.title_arabic:
        return _text_condition(StoredDocument.title_arabic, clause)
    if clause.field == SearchField.summary:
        return _text_condition(StoredDocument.summary, clause)
    if clause.field == SearchField.article_title:
        return StoredDocument.articles.any(_text_condition(StoredArticle.title, clause))
    if clause.field == SearchField.article_content:
        return StoredDocument.articles.any(_text_condition(StoredArticle.content, clause))
    return StoredDocument.articles.any(_text_condition(StoredArticle.number, clause))


class SqlDocumentStore:
    """SQL implementation of DocumentStore."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def add(self, document: LegalDocument) -> None:
        """Insert a document with its articles (ingestion hook for seeding and tests)."""
        row = StoredDocument(
            document_id=document.document_id,
            official_number=document.official_number,
            title=document.title,
            title_arabic=document.title_arabic,
            category=document.category.value,
            type=document.type.value,
            summary=document.summary,
            related_laws=[r.model_dump(mode="json") for r in document.related_laws],
            usage_count=document.usage_count,
            last_queried=document.last_queried,
            popular_articles=dict(document.popular_articles),
            articles=[
                StoredArticle(
                    position=position,
                    number=a.number,
                    title=a.title,
                    content=a.content,
                    keywords=list(a.keywords),
                )
                for position, a in enumerate(document.articles)
            ],
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"failed to add document {document.document_id}") from e

    async def find(self, query: DocumentQuery) -> list[LegalDocument]:
        """Run a disjunctive clause query ordered by first satisfied clause."""
        if not query.clauses:
            return []

        conditions = [clause_condition(c) for c in query.clauses]
        rank = case(
            *[(condition, index) for index, condition in enumerate(conditions)],
            else_=len(conditions),
        )

        stmt = select(StoredDocument).where(or_(*conditions))
        if query.category is not None:
            stmt = stmt.where(StoredDocument.category == query.category.value)
        stmt = stmt.order_by(rank, StoredDocument.seq).limit(query.limit)

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [_to_document(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise DocumentStoreError("document query failed") from e

    async def get(self, document_id: str) -> LegalDocument | None:
        """Get a document by id."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(StoredDocument).where(StoredDocument.document_id == document_id)
                )
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"failed to load document {document_id}") from e

        return _to_document(row) if row is not None else None

    async def get_article(self, document_id: str, number: str) -> Article | None:
        """Point lookup of an article by exact number."""
        stmt = (
            select(StoredArticle)
            .join(StoredDocument, StoredArticle.document_seq == StoredDocument.seq)
            .where(StoredDocument.document_id == document_id, StoredArticle.number == number)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"failed to load article {number} of {document_id}") from e

        return _to_article(row) if row is not None else None

    async def increment_usage(self, document_id: str, article_number: str | None = None) -> None:
        """Record that a document was surfaced to a user."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(StoredDocument).where(StoredDocument.document_id == document_id)
                )
                row = result.scalar_one_or_none()
                if row is None:
                    return

                row.usage_count = row.usage_count + 1
                row.last_queried = self._clock()

                if article_number and any(a.number == article_number for a in row.articles):
                    popular = dict(row.popular_articles)
                    popular[article_number] = popular.get(article_number, 0) + 1
                    # Reassign so the JSON column is flagged dirty
                    row.popular_articles = popular

                await session.commit()
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"failed to update usage of {document_id}") from e


class SqlSessionStore:
    """SQL implementation of SessionStore (whole-document persistence)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def load(self, session_id: str, user_id: str) -> ChatSession | None:
        """Load a session owned by user_id."""
        stmt = select(StoredSession).where(
            StoredSession.session_id == session_id,
            StoredSession.user_id == user_id,  # Enforce ownership
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise SessionStoreError(f"failed to load session {session_id}") from e

        if row is None:
            return None
        return ChatSession.model_validate(row.data)

    async def save(self, chat_session: ChatSession) -> None:
        """Persist the full session document (last write wins)."""
        data = chat_session.model_dump(mode="json")
        try:
            async with self._session_factory() as session:
                row = await session.get(StoredSession, chat_session.session_id)
                if row is None:
                    row = StoredSession(session_id=chat_session.session_id)
                    session.add(row)

                row.user_id = chat_session.user_id
                row.status = chat_session.status.value
                row.category = chat_session.category.value
                row.last_activity = chat_session.last_activity
                row.data = data

                await session.commit()
        except SQLAlchemyError as e:
            raise SessionStoreError(f"failed to save session {chat_session.session_id}") from e

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
        conditions = [StoredSession.user_id == user_id]
        if status is not None:
            conditions.append(StoredSession.status == status.value)
        if category is not None:
            conditions.append(StoredSession.category == category.value)

        offset = (max(page, 1) - 1) * limit
        try:
            async with self._session_factory() as session:
                total = await session.scalar(
                    select(func.count()).select_from(StoredSession).where(*conditions)
                )
                result = await session.execute(
                    select(StoredSession)
                    .where(*conditions)
                    .order_by(StoredSession.last_activity.desc())
                    .offset(offset)
                    .limit(limit)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise SessionStoreError(f"failed to list sessions for {user_id}") from e

        return SessionPage(
            sessions=[ChatSession.model_validate(row.data) for row in rows],
            total=total or 0,
        )
