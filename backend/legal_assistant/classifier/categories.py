"""Query classification: legal category plus the article a query names."""

import logging
from dataclasses import dataclass
from typing import Protocol

from backend.legal_assistant.classifier.articles import ArticleRef, extract_article_ref
from backend.legal_assistant.models.common import Category
from backend.legal_assistant.models.documents import LegalDocument

logger = logging.getLogger(__name__)

# Checked in insertion order; the first category with a keyword hit wins
CATEGORY_KEYWORDS: dict[Category, frozenset[str]] = {
    Category.civil: frozenset(
        {"مدني", "عقد", "التزام", "ضرر", "تعويض", "ملكية", "civil", "contract", "damages"}
    ),
    Category.criminal: frozenset(
        {"جنائي", "جريمة", "عقوبة", "سجن", "غرامة", "عقوبات", "criminal", "crime", "penalty", "prison"}
    ),
    Category.commercial: frozenset(
        {"تجاري", "شركة", "تجارة", "بيع", "شراء", "commercial", "company", "trade"}
    ),
    Category.family: frozenset(
        {"أسرة", "زواج", "طلاق", "نفقة", "حضانة", "marriage", "divorce", "custody", "alimony"}
    ),
    Category.labor: frozenset(
        {"عمل", "موظف", "راتب", "إجازة", "فصل", "employee", "salary", "dismissal", "labor"}
    ),
    Category.administrative: frozenset(
        {"إداري", "حكومة", "وزارة", "موظف عام", "administrative", "ministry", "government"}
    ),
    Category.tax: frozenset({"ضريبة", "رسوم", "جمارك", "tax", "customs", "duties"}),
    Category.real_estate: frozenset(
        {"عقار", "أرض", "بناء", "ملكية عقارية", "real estate", "land", "building"}
    ),
}


class DocumentSearcher(Protocol):
    """Anything that can run a category-less discovery search."""

    async def search(
        self, query: str, category: Category | None = None
    ) -> list[LegalDocument]: ...


@dataclass(frozen=True)
class Classification:
    """Category and target article resolved for one query."""

    category: Category | None
    article: ArticleRef | None

    @property
    def effective_category(self) -> Category:
        return self.category or Category.general


def keyword_category(text: str) -> Category | None:
    """Match ``text`` against the static keyword table."""
    lowered = text.casefold()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return category
    return None


class QueryClassifier:
    """Resolves a query's legal category and named article."""

    def __init__(self, searcher: DocumentSearcher) -> None:
        self._searcher = searcher

    async def classify(self, text: str, explicit_category: Category | None = None) -> Classification:
        """Classify a query.

        An explicit category always wins. Otherwise a discovery search (no
        category filter) adopts the category of the best document, and the
        keyword table is the last resort. None means General Inquiry.
        """
        article = extract_article_ref(text)

        if explicit_category is not None:
            return Classification(category=explicit_category, article=article)

        documents = await self._searcher.search(text)
        if documents:
            category = documents[0].category
            logger.debug(f"[classifier] category={category.value} via discovery search")
            return Classification(category=category, article=article)

        category = keyword_category(text)
        logger.debug(f"[classifier] category={category.value if category else None} via keywords")
        return Classification(category=category, article=article)
