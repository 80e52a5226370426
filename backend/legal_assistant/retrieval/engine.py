"""Retrieval engine - ranked document search for a chat query.

Search strategy:
- Base clauses: the whole query as a case-insensitive substring of the
  document titles, summary and every article's title/content
- Variant clauses: digit-script normalised copies of the query and spellings
  of the "article" keyword (OR-ed in, recall only grows)
- When the query names an article, exact article-number clauses go first so
  documents holding that article lead the store ordering
- Results are re-ranked with a stable sort: exact article hits first, then
  documents belonging to a domain the query mentions (criminal, energy)
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from backend.legal_assistant.classifier.articles import (
    ArticleRef,
    article_keyword_variants,
    extract_article_ref,
    to_arabic_indic_digits,
    to_ascii_digits,
)
from backend.legal_assistant.db.repositories import DocumentStore
from backend.legal_assistant.errors import DocumentStoreError
from backend.legal_assistant.models.common import Category, DocumentType
from backend.legal_assistant.models.documents import LegalDocument
from backend.legal_assistant.retrieval.query import DocumentQuery, QueryBuilder, SearchField
from backend.legal_assistant.utils.metrics import PrometheusChatMetrics

logger = logging.getLogger(__name__)

BASE_FIELDS = (
    SearchField.title,
    SearchField.title_arabic,
    SearchField.summary,
    SearchField.article_title,
    SearchField.article_content,
)
VARIANT_FIELDS = (
    SearchField.title_arabic,
    SearchField.article_title,
    SearchField.article_content,
)


@dataclass(frozen=True)
class DomainBoost:
    """Moves documents of one legal domain ahead when the query mentions it."""

    name: str
    markers: tuple[str, ...]
    applies: Callable[[LegalDocument], bool]

    def triggered_by(self, normalized_query: str) -> bool:
        return any(marker in normalized_query for marker in self.markers)


def _is_criminal(document: LegalDocument) -> bool:
    return document.type == DocumentType.criminal_code or document.category == Category.criminal


def _is_energy(document: LegalDocument) -> bool:
    titles = f"{document.title} {document.title_arabic}".casefold()
    return "كهرباء" in titles or "electricity" in titles


DOMAIN_BOOSTS = (
    DomainBoost(
        name="criminal",
        markers=("عقوبات", "جنائي", "جريمة", "penal", "criminal", "crime"),
        applies=_is_criminal,
    ),
    DomainBoost(
        name="energy",
        markers=("كهرباء", "طاقة", "electricity", "energy"),
        applies=_is_energy,
    ),
)


def build_document_query(
    text: str,
    *,
    category: Category | None,
    article: ArticleRef | None,
    limit: int,
) -> DocumentQuery:
    """Assemble the clause list for one search."""
    builder = QueryBuilder()

    # Priority clauses: exact article number in both digit scripts
    if article is not None:
        builder.add(SearchField.article_number, article.number, exact=True)
        builder.add(SearchField.article_number, to_arabic_indic_digits(article.number), exact=True)

    builder.add_many(BASE_FIELDS, text)

    variants = [to_ascii_digits(text), to_arabic_indic_digits(text)]
    variants.extend(article_keyword_variants(text))
    for variant in variants:
        if variant != text:
            builder.add_many(VARIANT_FIELDS, variant)

    return builder.build(category=category, limit=limit)


def rank_documents(
    documents: list[LegalDocument], text: str, article: ArticleRef | None
) -> list[LegalDocument]:
    """Stable re-rank: exact article hits, then domain matches, then the rest."""
    normalized = to_ascii_digits(text).casefold()
    boost = next((b for b in DOMAIN_BOOSTS if b.triggered_by(normalized)), None)

    def sort_key(document: LegalDocument) -> tuple[int, int]:
        exact = article is not None and document.find_article(article.number) is not None
        in_domain = boost is not None and boost.applies(document)
        return (0 if exact else 1, 0 if in_domain else 1)

    return sorted(documents, key=sort_key)


class RetrievalEngine:
    """Read-only ranked search over a DocumentStore.

    Usage counters are not touched here; the caller increments them for the
    documents it actually surfaces.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        limit: int = 5,
        metrics: PrometheusChatMetrics | None = None,
    ) -> None:
        self._store = store
        self._limit = limit
        self._metrics = metrics or PrometheusChatMetrics()

    async def search(self, query: str, category: Category | None = None) -> list[LegalDocument]:
        """Search documents relevant to ``query``.

        Args:
            query: Raw user text
            category: Restrict results to this category (None searches all)

        Returns:
            Up to ``limit`` documents, most relevant first. An empty list means
            no grounding is available; it is never an error.
        """
        text = query.strip()
        if not text:
            return []

        article = extract_article_ref(text)
        doc_query = build_document_query(
            text, category=category, article=article, limit=self._limit
        )

        try:
            documents = await self._store.find(doc_query)
        except DocumentStoreError as e:
            logger.error(f"[retrieval] store query failed, treating as no grounding: {e}")
            documents = []

        ranked = rank_documents(documents, text, article)

        self._metrics.record_retrieval(
            "filtered" if category is not None else "discovery", len(ranked)
        )
        logger.info(
            f"[retrieval] query={text[:100]!r} category={category.value if category else None} "
            f"article={article.number if article else None} documents={len(ranked)}"
        )
        return ranked
