"""Unit tests for the query classifier."""

from unittest.mock import AsyncMock

import pytest

from backend.legal_assistant.classifier.categories import (
    CATEGORY_KEYWORDS,
    Classification,
    QueryClassifier,
    keyword_category,
)
from backend.legal_assistant.models.common import Category
from backend.legal_assistant.models.documents import LegalDocument


@pytest.fixture
def searcher() -> AsyncMock:
    """Searcher returning no documents by default."""
    mock = AsyncMock()
    mock.search.return_value = []
    return mock


@pytest.mark.asyncio
async def test_explicit_category_always_wins(searcher: AsyncMock) -> None:
    """Explicit category skips inference entirely."""
    classifier = QueryClassifier(searcher)

    result = await classifier.classify("عقوبة السرقة", Category.family)

    assert result.category == Category.family
    searcher.search.assert_not_called()


@pytest.mark.asyncio
async def test_discovery_search_adopts_top_document_category(
    searcher: AsyncMock, corpus: list[LegalDocument]
) -> None:
    """Without an explicit category the best document's category is used."""
    penal = corpus[1]
    searcher.search.return_value = [penal, corpus[0]]
    classifier = QueryClassifier(searcher)

    result = await classifier.classify("contract")

    assert result.category == Category.criminal
    searcher.search.assert_awaited_once_with("contract")


@pytest.mark.asyncio
async def test_keyword_table_used_when_discovery_finds_nothing(searcher: AsyncMock) -> None:
    classifier = QueryClassifier(searcher)

    result = await classifier.classify("ما هي شروط الطلاق")

    assert result.category == Category.family


@pytest.mark.asyncio
async def test_unmatched_query_is_general_inquiry(searcher: AsyncMock) -> None:
    classifier = QueryClassifier(searcher)

    result = await classifier.classify("hello there")

    assert result.category is None
    assert result.effective_category == Category.general


@pytest.mark.asyncio
async def test_article_extracted_alongside_category(searcher: AsyncMock) -> None:
    classifier = QueryClassifier(searcher)

    result = await classifier.classify("المادة ٢٧", Category.administrative)

    assert result.article is not None
    assert result.article.number == "27"


@pytest.mark.asyncio
async def test_no_article_is_not_an_error(searcher: AsyncMock) -> None:
    classifier = QueryClassifier(searcher)

    result = await classifier.classify("tax on land")

    assert result.article is None


def test_first_matching_category_wins() -> None:
    """Civil is checked before Criminal, so a query hitting both is Civil."""
    assert keyword_category("تعويض عن جريمة") == Category.civil


def test_keyword_match_is_case_insensitive() -> None:
    assert keyword_category("Divorce procedure") == Category.family


def test_keyword_table_uses_fixed_categories() -> None:
    assert all(isinstance(category, Category) for category in CATEGORY_KEYWORDS)
    assert Category.general not in CATEGORY_KEYWORDS


def test_classification_effective_category() -> None:
    assert Classification(category=Category.tax, article=None).effective_category == Category.tax
