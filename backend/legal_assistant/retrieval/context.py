"""Prompt context assembled from retrieved documents."""

from backend.legal_assistant.models.documents import Article, LegalDocument

DOCUMENT_SEPARATOR = "\n\n---\n\n"

_LABELS = {
    "ar": {"title": "العنوان", "content": "المحتوى", "article": "المادة"},
    "en": {"title": "Title", "content": "Content", "article": "Article"},
}


def format_article(article: Article, language: str = "ar") -> str:
    labels = _LABELS[language]
    return f"{labels['article']} {article.number}: {article.title}\n{article.content}"


def _document_text(document: LegalDocument) -> str:
    if document.summary:
        return document.summary
    return "\n".join(article.content for article in document.articles)


def build_context(
    documents: list[LegalDocument],
    article_number: str | None = None,
    *,
    char_budget: int = 1000,
    language: str = "ar",
) -> str:
    """Render documents as bounded prompt text.

    When ``article_number`` names an article a document contains, that
    article replaces the document's generic excerpt. Each document
    contributes at most ``char_budget`` characters of content.
    """
    labels = _LABELS[language]
    sections = []

    for document in documents:
        article = document.find_article(article_number) if article_number else None
        content = format_article(article, language) if article else _document_text(document)

        if len(content) > char_budget:
            content = content[:char_budget] + "..."

        sections.append(
            f"{labels['title']}: {document.display_title}\n{labels['content']}: {content}"
        )

    return DOCUMENT_SEPARATOR.join(sections)
