"""Legal document domain models."""

from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field, field_validator, model_validator

from backend.legal_assistant.classifier.articles import to_ascii_digits
from backend.legal_assistant.models.common import ApiModel, Category, DocumentType


class Article(ApiModel):
    """Numbered clause of a legal document; the finest unit of retrieval."""

    model_config = ConfigDict(frozen=True)

    number: str = Field(..., min_length=1, description="Article number, canonical ASCII digits")
    title: str
    content: str
    keywords: list[str] = Field(default_factory=list)

    @field_validator("number")
    @classmethod
    def canonical_number(cls, v: str) -> str:
        return to_ascii_digits(v.strip())


class RelatedLaw(ApiModel):
    """Reference to another document, resolved on demand by id."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    relationship: Literal["amends", "repeals", "references", "implements", "supersedes"]
    description: str | None = None


class LegalDocument(ApiModel):
    """A statute or regulation made of ordered articles.

    Read-only for the chat pipeline except for usage counters, which only the
    document store updates.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str
    title: str
    title_arabic: str
    category: Category
    type: DocumentType = DocumentType.other
    official_number: str
    summary: str | None = None
    articles: list[Article] = Field(default_factory=list)
    related_laws: list[RelatedLaw] = Field(default_factory=list)

    # Usage tracking
    usage_count: int = 0
    last_queried: datetime | None = None
    popular_articles: dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def unique_article_numbers(self) -> "LegalDocument":
        numbers = [article.number for article in self.articles]
        duplicates = sorted({n for n in numbers if numbers.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate article numbers: {', '.join(duplicates)}")
        return self

    @property
    def display_title(self) -> str:
        return self.title_arabic or self.title

    def find_article(self, number: str) -> Article | None:
        """Exact string lookup of an article by its canonical number."""
        for article in self.articles:
            if article.number == number:
                return article
        return None


class DocumentRef(ApiModel):
    """Document summary returned alongside a chat answer."""

    id: str
    title: str
    category: Category
    type: DocumentType
    official_number: str

    @classmethod
    def from_document(cls, document: LegalDocument) -> "DocumentRef":
        return cls(
            id=document.document_id,
            title=document.display_title,
            category=document.category,
            type=document.type,
            official_number=document.official_number,
        )
