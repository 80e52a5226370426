"""Chat endpoints - POST /chat/message plus session lifecycle and listing."""

import logging
import math
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from backend.legal_assistant.api.auth import get_current_context
from backend.legal_assistant.api.dependencies import enforce_rate_limit, get_chat_service
from backend.legal_assistant.db.context import RequestContext
from backend.legal_assistant.errors import (
    InternalError,
    InvalidInputError,
    LegalAssistantError,
    NotFoundError,
    SessionStateError,
)
from backend.legal_assistant.models.chat import (
    CategoryListResponse,
    ChatMessageRequest,
    ChatTurnResponse,
    Pagination,
    RateSessionRequest,
    SessionListResponse,
    SessionSummary,
)
from backend.legal_assistant.models.common import Category, SessionStatus
from backend.legal_assistant.models.sessions import ChatSession
from backend.legal_assistant.orchestration.chat import ChatService

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)


def to_http_exception(error: LegalAssistantError) -> HTTPException:
    """Map the error taxonomy onto HTTP status codes."""
    if isinstance(error, SessionStateError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, InvalidInputError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if not isinstance(error, InternalError):
        logger.error(f"Unmapped application error: {type(error).__name__}: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal error"
    )


@router.post(
    "/message",
    response_model=ChatTurnResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
async def send_message(
    body: ChatMessageRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[ChatService, Depends(get_chat_service)],
) -> ChatTurnResponse:
    """Answer one legal question.

    Args:
        body: Message, optional session id and optional category
        ctx: Request context (user_id from auth)
        service: Chat service

    Returns:
        ChatTurnResponse with the answer, referenced documents and confidence

    Raises:
        HTTPException: 400 invalid input, 404 unknown session, 409 inactive
            session, 500 on storage failure
    """
    try:
        return await service.handle_message(
            ctx.user_id,
            body.message,
            session_id=body.session_id,
            category=body.category,
        )
    except LegalAssistantError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.error(f"[POST /chat/message] user_id={ctx.user_id} failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal error"
        ) from e


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories() -> CategoryListResponse:
    """List the legal categories a question can be filed under."""
    return CategoryListResponse(categories=[c.value for c in Category])


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[ChatService, Depends(get_chat_service)],
    session_status: Annotated[str, Query(alias="status")] = SessionStatus.active.value,
    category: Annotated[Category | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> SessionListResponse:
    """List the caller's sessions, most recent activity first.

    ``status=all`` lists every status.
    """
    if session_status == "all":
        status_filter = None
    else:
        try:
            status_filter = SessionStatus(session_status)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status: {session_status}",
            ) from e

    try:
        result = await service.list_sessions(
            ctx.user_id, status=status_filter, category=category, page=page, limit=limit
        )
    except LegalAssistantError as e:
        raise to_http_exception(e) from e

    return SessionListResponse(
        data=[SessionSummary.from_session(s) for s in result.sessions],
        pagination=Pagination(
            current=page,
            pages=math.ceil(result.total / limit),
            total=result.total,
        ),
    )


@router.get("/sessions/{session_id}", response_model=ChatSession)
async def get_session(
    session_id: str,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[ChatService, Depends(get_chat_service)],
) -> ChatSession:
    """Get a session with its full message history (owner only)."""
    try:
        return await service.get_session(ctx.user_id, session_id)
    except LegalAssistantError as e:
        raise to_http_exception(e) from e


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[ChatService, Depends(get_chat_service)],
) -> Response:
    """Soft-delete a session."""
    try:
        await service.delete_session(ctx.user_id, session_id)
    except LegalAssistantError as e:
        raise to_http_exception(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sessions/{session_id}/complete", response_model=SessionSummary)
async def complete_session(
    session_id: str,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[ChatService, Depends(get_chat_service)],
) -> SessionSummary:
    """Mark a session completed."""
    try:
        session = await service.complete_session(ctx.user_id, session_id)
    except LegalAssistantError as e:
        raise to_http_exception(e) from e
    return SessionSummary.from_session(session)


@router.post("/sessions/{session_id}/archive", response_model=SessionSummary)
async def archive_session(
    session_id: str,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[ChatService, Depends(get_chat_service)],
) -> SessionSummary:
    """Archive a session."""
    try:
        session = await service.archive_session(ctx.user_id, session_id)
    except LegalAssistantError as e:
        raise to_http_exception(e) from e
    return SessionSummary.from_session(session)


@router.post("/sessions/{session_id}/rate", response_model=ChatSession)
async def rate_session(
    session_id: str,
    body: RateSessionRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[ChatService, Depends(get_chat_service)],
) -> ChatSession:
    """Rate a session from 1 to 5 with optional comment and feedback tags."""
    try:
        return await service.rate_session(
            ctx.user_id, session_id, body.rating, body.comment, body.categories
        )
    except LegalAssistantError as e:
        raise to_http_exception(e) from e
