"""Document lookup endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from backend.legal_assistant.api.dependencies import get_document_store
from backend.legal_assistant.classifier.articles import to_ascii_digits
from backend.legal_assistant.db.repositories import DocumentStore
from backend.legal_assistant.errors import DocumentStoreError
from backend.legal_assistant.models.documents import Article, LegalDocument

router = APIRouter(prefix="/documents", tags=["documents"])
logger = logging.getLogger(__name__)


@router.get("/{document_id}", response_model=LegalDocument)
async def get_document(
    document_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> LegalDocument:
    """Get a document with all of its articles."""
    try:
        document = await store.get(document_id)
    except DocumentStoreError as e:
        logger.error(f"[GET /documents] document_id={document_id} failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal error"
        ) from e

    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return document


@router.get("/{document_id}/articles/{number}", response_model=Article)
async def get_article(
    document_id: str,
    number: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> Article:
    """Look up one article by number (any digit script)."""
    canonical = to_ascii_digits(number.strip())

    try:
        article = await store.get_article(document_id, canonical)
    except DocumentStoreError as e:
        logger.error(
            f"[GET /documents/articles] document_id={document_id} number={canonical} failed: {e}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal error"
        ) from e

    if article is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Article not found")
    return article
