"""Shared pytest fixtures for all test suites."""

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from backend.legal_assistant.db.engine import create_session_factory
from backend.legal_assistant.db.inmemory import InMemoryDocumentStore, InMemorySessionStore
from backend.legal_assistant.db.models import Base
from backend.legal_assistant.models.common import Category, DocumentType
from backend.legal_assistant.models.documents import Article, LegalDocument

DocumentFactory = Callable[..., LegalDocument]


class StepClock:
    """Deterministic clock; each call advances by ``step`` unless told otherwise."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def clock() -> StepClock:
    """Clock advancing one second per call."""
    return StepClock()


@pytest.fixture
def make_document() -> DocumentFactory:
    """Factory for LegalDocument test data."""

    def _make(
        document_id: str,
        *,
        title: str | None = None,
        title_arabic: str | None = None,
        category: Category = Category.civil,
        type: DocumentType = DocumentType.other,
        summary: str | None = None,
        articles: list[tuple[str, str, str]] | None = None,
    ) -> LegalDocument:
        return LegalDocument(
            document_id=document_id,
            title=title or f"Law {document_id}",
            title_arabic=title_arabic if title_arabic is not None else f"قانون {document_id}",
            category=category,
            type=type,
            official_number=f"LAW-{document_id}",
            summary=summary,
            articles=[
                Article(number=number, title=article_title, content=content)
                for number, article_title, content in (articles or [])
            ],
        )

    return _make


@pytest.fixture
def electricity_law(make_document: DocumentFactory) -> LegalDocument:
    """Document holding article 27 with content "penalty text"."""
    return make_document(
        "electricity",
        title="Electricity Law",
        title_arabic="قانون الكهرباء",
        category=Category.administrative,
        summary="Regulates the electricity sector",
        articles=[
            ("1", "Name", "This law is called the electricity law"),
            ("27", "Clearance distances", "penalty text"),
        ],
    )


@pytest.fixture
def corpus(make_document: DocumentFactory, electricity_law: LegalDocument) -> list[LegalDocument]:
    """Small mixed corpus; the electricity law is deliberately not first."""
    return [
        make_document(
            "civil",
            title="Civil Code",
            title_arabic="القانون المدني",
            category=Category.civil,
            type=DocumentType.civil_code,
            summary="Contracts and obligations",
            articles=[("87", "Contract", "A contract binds offer and acceptance")],
        ),
        make_document(
            "penal",
            title="Penal Code",
            title_arabic="قانون العقوبات",
            category=Category.criminal,
            type=DocumentType.criminal_code,
            summary="Crimes and penalties",
            articles=[("3", "Legality", "No crime and no penalty without a law")],
        ),
        electricity_law,
    ]


@pytest.fixture
def document_store(corpus: list[LegalDocument]) -> InMemoryDocumentStore:
    """In-memory document store seeded with the test corpus."""
    return InMemoryDocumentStore(corpus)


@pytest.fixture
def session_store() -> InMemorySessionStore:
    """Empty in-memory session store."""
    return InMemorySessionStore()


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Async SQLite engine with all tables created.

    Usage:
        @pytest.mark.asyncio
        async def test_something(sqlite_session_factory):
            store = SqlDocumentStore(sqlite_session_factory)
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def sqlite_session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the SQLite test engine."""
    return create_session_factory(sqlite_engine)
