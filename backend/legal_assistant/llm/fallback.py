"""Deterministic answers built from retrieval results alone.

Used whenever the generation service is unavailable. Never raises and never
returns an empty string.
"""

from backend.legal_assistant.models.documents import LegalDocument
from backend.legal_assistant.retrieval.context import format_article

_TEMPLATES = {
    "ar": {
        "article": (
            "بناءً على الوثائق القانونية المتاحة:\n\n{article}\n\n"
            "ملاحظة: هذه المعلومات مستخرجة مباشرة من الوثائق القانونية. "
            "للحصول على تفسير مفصل، يرجى المحاولة مرة أخرى لاحقاً."
        ),
        "document": (
            "تم العثور على معلومات قانونية ذات صلة في: {title}\n\n"
            "للأسف، لا يمكنني تقديم تفسير مفصل في الوقت الحالي بسبب مشكلة تقنية مؤقتة. "
            "يمكنك الاطلاع على الوثيقة المرجعية للحصول على المعلومات الكاملة."
        ),
        "documents": (
            "تم العثور على {count} وثيقة قانونية ذات صلة بسؤالك:\n\n{titles}\n\n"
            "للأسف، لا يمكنني تقديم تفسير مفصل في الوقت الحالي بسبب مشكلة تقنية مؤقتة. "
            "يرجى المحاولة مرة أخرى لاحقاً."
        ),
        "none": (
            "لم يتم العثور على مواد قانونية ذات صلة بسؤالك، ولا يمكنني تقديم إجابة موثوقة.\n\n"
            "إذا كان لديك سؤال حول مادة قانونية معينة، يرجى ذكر رقم المادة واسم القانون."
        ),
    },
    "en": {
        "article": (
            "Based on the available legal documents:\n\n{article}\n\n"
            "Note: this text is quoted directly from the legal documents. "
            "Please try again later for a detailed explanation."
        ),
        "document": (
            "Relevant legal information was found in: {title}\n\n"
            "A detailed explanation is not available right now because of a temporary "
            "technical problem. Please refer to the document for the full text."
        ),
        "documents": (
            "Found {count} legal document(s) related to your question:\n\n{titles}\n\n"
            "A detailed explanation is not available right now because of a temporary "
            "technical problem. Please try again later."
        ),
        "none": (
            "No relevant legal material was found for your question, so an answer cannot "
            "be given with confidence.\n\n"
            "If you are asking about a specific article, please include the article "
            "number and the name of the law."
        ),
    },
}


class FallbackSynthesizer:
    """Builds an answer from the documents retrieved for this turn."""

    def __init__(self, language: str = "ar") -> None:
        self._language = language
        self._templates = _TEMPLATES[language]

    def synthesize(self, documents: list[LegalDocument], article_number: str | None = None) -> str:
        if not documents:
            return self._templates["none"]

        top = documents[0]
        if article_number:
            article = top.find_article(article_number)
            if article is not None:
                return self._templates["article"].format(
                    article=format_article(article, self._language)
                )
            return self._templates["document"].format(title=top.display_title)

        titles = "\n".join(f"{i}. {d.display_title}" for i, d in enumerate(documents, start=1))
        return self._templates["documents"].format(count=len(documents), titles=titles)
