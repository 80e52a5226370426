"""Store-neutral description of a document search.

A ``DocumentQuery`` is a disjunction of clauses. Stores return every document
that satisfies at least one clause, ordered by the index of the first clause
it satisfies and then by store insertion order, so clauses placed earlier act
as a priority tie-break.
"""

from dataclasses import dataclass, field
from enum import Enum

from backend.legal_assistant.models.common import Category


class SearchField(str, Enum):
    """Document fields a clause can target."""

    title = "title"
    title_arabic = "title_arabic"
    summary = "summary"
    article_title = "article_title"
    article_content = "article_content"
    article_number = "article_number"


@dataclass(frozen=True)
class QueryClause:
    """Case-insensitive substring match, or exact match when ``exact`` is set."""

    field: SearchField
    value: str
    exact: bool = False

    def matches(self, text: str | None) -> bool:
        if text is None:
            return False
        if self.exact:
            return text == self.value
        return self.value.casefold() in text.casefold()


@dataclass(frozen=True)
class DocumentQuery:
    """Ordered OR of clauses with an optional category restriction."""

    clauses: tuple[QueryClause, ...]
    category: Category | None = None
    limit: int = 5


@dataclass
class QueryBuilder:
    """Accumulates clauses, dropping exact duplicates while keeping order."""

    clauses: list[QueryClause] = field(default_factory=list)

    def add(self, field_: SearchField, value: str, *, exact: bool = False) -> None:
        if not value:
            return
        clause = QueryClause(field=field_, value=value, exact=exact)
        if clause not in self.clauses:
            self.clauses.append(clause)

    def add_many(self, fields: tuple[SearchField, ...], value: str) -> None:
        for field_ in fields:
            self.add(field_, value)

    def build(self, *, category: Category | None, limit: int) -> DocumentQuery:
        return DocumentQuery(clauses=tuple(self.clauses), category=category, limit=limit)
