"""Unit tests for the retrieval engine."""

from unittest.mock import AsyncMock

import pytest

from backend.legal_assistant.classifier.articles import extract_article_ref
from backend.legal_assistant.db.inmemory import InMemoryDocumentStore
from backend.legal_assistant.errors import DocumentStoreError
from backend.legal_assistant.models.common import Category, DocumentType
from backend.legal_assistant.models.documents import LegalDocument
from backend.legal_assistant.retrieval.engine import (
    RetrievalEngine,
    build_document_query,
    rank_documents,
)
from backend.legal_assistant.retrieval.query import SearchField


class TestBuildDocumentQuery:
    """Tests for clause assembly."""

    def test_article_number_clauses_come_first(self) -> None:
        text = "article 27"
        query = build_document_query(
            text, category=None, article=extract_article_ref(text), limit=5
        )

        assert query.clauses[0].field == SearchField.article_number
        assert query.clauses[0].value == "27"
        assert query.clauses[0].exact is True
        assert query.clauses[1].value == "٢٧"

    def test_base_clauses_cover_titles_summary_and_articles(self) -> None:
        query = build_document_query("electricity", category=None, article=None, limit=5)

        fields = {c.field for c in query.clauses if c.value == "electricity"}
        assert fields == {
            SearchField.title,
            SearchField.title_arabic,
            SearchField.summary,
            SearchField.article_title,
            SearchField.article_content,
        }

    def test_variants_add_clauses(self) -> None:
        query = build_document_query("المادة ٢٧", category=None, article=None, limit=5)

        values = {c.value for c in query.clauses}
        assert "المادة 27" in values
        assert "مادة ٢٧" in values

    def test_category_and_limit_pass_through(self) -> None:
        query = build_document_query("x", category=Category.tax, article=None, limit=3)

        assert query.category == Category.tax
        assert query.limit == 3


class TestRankDocuments:
    """Tests for the domain re-rank."""

    def test_criminal_marker_moves_criminal_documents_first(
        self, corpus: list[LegalDocument]
    ) -> None:
        ranked = rank_documents(corpus, "ما هي عقوبات الاعتداء", None)

        assert ranked[0].document_id == "penal"

    def test_energy_marker_moves_electricity_documents_first(
        self, corpus: list[LegalDocument]
    ) -> None:
        ranked = rank_documents(corpus, "electricity tariffs", None)

        assert ranked[0].document_id == "electricity"

    def test_rerank_is_stable_within_buckets(self, make_document) -> None:
        docs = [
            make_document("a", category=Category.civil),
            make_document("b", category=Category.criminal),
            make_document("c", category=Category.tax),
            make_document("d", category=Category.civil, type=DocumentType.criminal_code),
        ]

        ranked = rank_documents(docs, "criminal liability", None)

        assert [d.document_id for d in ranked] == ["b", "d", "a", "c"]

    def test_no_marker_keeps_order(self, corpus: list[LegalDocument]) -> None:
        ranked = rank_documents(corpus, "general question", None)

        assert ranked == corpus

    def test_exact_article_hit_beats_domain_match(self, corpus: list[LegalDocument]) -> None:
        text = "عقوبات المادة 27"
        ranked = rank_documents(corpus, text, extract_article_ref(text))

        assert ranked[0].document_id == "electricity"
        assert ranked[1].document_id == "penal"


class TestRetrievalEngine:
    """Tests for RetrievalEngine.search."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "query",
        ["article 27", "المادة ٢٧", "the twenty-seventh article", "٢٧", "مادة 27"],
    )
    async def test_article_holder_is_first(
        self, document_store: InMemoryDocumentStore, query: str
    ) -> None:
        """A document holding the named article is at index 0."""
        engine = RetrievalEngine(document_store)

        results = await engine.search(query)

        assert results
        assert results[0].document_id == "electricity"
        assert results[0].find_article("27") is not None

    @pytest.mark.asyncio
    async def test_article_holder_first_even_when_others_match_text(
        self, make_document
    ) -> None:
        store = InMemoryDocumentStore(
            [
                make_document("a", summary="see article 27 of the other law"),
                make_document("b", articles=[("27", "Target", "body")]),
            ]
        )
        engine = RetrievalEngine(store)

        results = await engine.search("article 27")

        assert [d.document_id for d in results] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_search_is_idempotent(self, document_store: InMemoryDocumentStore) -> None:
        engine = RetrievalEngine(document_store)

        first = await engine.search("law")
        second = await engine.search("law")

        assert [d.document_id for d in first] == ["electricity", "penal"]
        assert first == second

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   "])
    async def test_empty_query_returns_empty(
        self, document_store: InMemoryDocumentStore, query: str
    ) -> None:
        engine = RetrievalEngine(document_store)

        assert await engine.search(query) == []

    @pytest.mark.asyncio
    async def test_no_match_returns_empty(self, document_store: InMemoryDocumentStore) -> None:
        engine = RetrievalEngine(document_store)

        assert await engine.search("maritime salvage") == []

    @pytest.mark.asyncio
    async def test_empty_store_returns_empty(self) -> None:
        engine = RetrievalEngine(InMemoryDocumentStore())

        assert await engine.search("article 27") == []

    @pytest.mark.asyncio
    async def test_substring_match_is_case_insensitive(
        self, document_store: InMemoryDocumentStore
    ) -> None:
        engine = RetrievalEngine(document_store)

        results = await engine.search("ELECTRICITY")

        assert [d.document_id for d in results] == ["electricity"]

    @pytest.mark.asyncio
    async def test_category_filter(self, document_store: InMemoryDocumentStore) -> None:
        engine = RetrievalEngine(document_store)

        results = await engine.search("Code", Category.criminal)

        assert [d.document_id for d in results] == ["penal"]

    @pytest.mark.asyncio
    async def test_results_are_capped(self, make_document) -> None:
        store = InMemoryDocumentStore(
            [make_document(str(i), summary="shared phrase") for i in range(8)]
        )
        engine = RetrievalEngine(store, limit=5)

        results = await engine.search("shared phrase")

        assert len(results) == 5

    @pytest.mark.asyncio
    async def test_search_does_not_touch_usage(
        self, document_store: InMemoryDocumentStore
    ) -> None:
        engine = RetrievalEngine(document_store)

        await engine.search("article 27")

        document = await document_store.get("electricity")
        assert document is not None
        assert document.usage_count == 0

    @pytest.mark.asyncio
    async def test_store_failure_is_treated_as_no_grounding(self) -> None:
        store = AsyncMock()
        store.find.side_effect = DocumentStoreError("connection reset")
        engine = RetrievalEngine(store)

        assert await engine.search("article 27") == []
