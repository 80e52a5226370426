"""Wiring of stores and services as FastAPI dependencies.

Without DATABASE_URL both stores live in memory (seeded with the dev corpus
when SEED_DEV_DATA is on); with it the SQLAlchemy stores are used. Chat rate
limiting uses Redis when REDIS_URL is set.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncEngine

from backend.legal_assistant.api.auth import get_current_context
from backend.legal_assistant.config import Settings, get_settings
from backend.legal_assistant.db.context import RequestContext
from backend.legal_assistant.db.engine import (
    create_all,
    create_async_engine_from_settings,
    create_session_factory,
)
from backend.legal_assistant.db.inmemory import (
    InMemoryDocumentStore,
    InMemoryRateLimiter,
    InMemorySessionStore,
)
from backend.legal_assistant.db.repositories import DocumentStore, RateLimiter, SessionStore
from backend.legal_assistant.db.seed_dev import dev_documents, seed_dev_documents
from backend.legal_assistant.db.sql_repositories import SqlDocumentStore, SqlSessionStore
from backend.legal_assistant.llm.client import create_generation_gateway
from backend.legal_assistant.orchestration.chat import ChatService
from backend.legal_assistant.ratelimit import RateLimitPolicy, RedisRateLimiter
from backend.legal_assistant.retrieval.engine import RetrievalEngine
from backend.legal_assistant.sessions.manager import SessionManager

logger = logging.getLogger(__name__)


@dataclass
class Container:
    """Process-wide stores and services."""

    documents: DocumentStore
    sessions: SessionStore
    rate_limit: RateLimitPolicy
    chat: ChatService
    engine: AsyncEngine | None = None
    redis: aioredis.Redis | None = None


def build_container(settings: Settings) -> Container:
    """Build stores and services from settings."""
    engine: AsyncEngine | None = None
    documents: DocumentStore
    sessions: SessionStore

    if settings.database_url:
        engine = create_async_engine_from_settings(settings)
        factory = create_session_factory(engine)
        documents = SqlDocumentStore(factory)
        sessions = SqlSessionStore(factory)
    else:
        documents = InMemoryDocumentStore(dev_documents() if settings.seed_dev_data else ())
        sessions = InMemorySessionStore()

    limiter: RateLimiter
    redis_client: aioredis.Redis | None = None
    if settings.redis_url:
        redis_client = aioredis.from_url(settings.redis_url, decode_responses=True)
        limiter = RedisRateLimiter(redis_client, max_requests=settings.chat_requests_per_min)
    else:
        limiter = InMemoryRateLimiter(max_requests=settings.chat_requests_per_min)

    retrieval = RetrievalEngine(documents, limit=settings.retrieval_limit)
    chat = ChatService(
        documents=documents,
        sessions=SessionManager(sessions),
        engine=retrieval,
        gateway=create_generation_gateway(settings),
        max_message_length=settings.max_message_length,
        history_window=settings.history_window,
        context_char_budget=settings.context_char_budget,
        category_instructions=settings.category_instructions,
        language=settings.response_language,
    )

    return Container(
        documents=documents,
        sessions=sessions,
        rate_limit=RateLimitPolicy(limiter),
        chat=chat,
        engine=engine,
        redis=redis_client,
    )


_container: Container | None = None


def get_container() -> Container:
    """Get global container instance."""
    global _container
    if _container is None:
        _container = build_container(get_settings())
    return _container


async def init_storage(container: Container, settings: Settings) -> None:
    """Create tables and seed the dev corpus for SQL-backed deployments."""
    if container.engine is None or not isinstance(container.documents, SqlDocumentStore):
        return

    await create_all(container.engine)
    if settings.seed_dev_data:
        inserted = await seed_dev_documents(container.documents)
        logger.info(f"Seeded {inserted} dev document(s)")


async def shutdown_storage() -> None:
    """Dispose the engine, close Redis and forget the container."""
    global _container
    if _container is not None:
        if _container.engine is not None:
            await _container.engine.dispose()
        if _container.redis is not None:
            await _container.redis.aclose()
    _container = None


def get_chat_service() -> ChatService:
    return get_container().chat


def get_document_store() -> DocumentStore:
    return get_container().documents


def get_rate_limit_policy() -> RateLimitPolicy:
    return get_container().rate_limit


async def enforce_rate_limit(
    request: Request,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    policy: Annotated[RateLimitPolicy, Depends(get_rate_limit_policy)],
) -> None:
    """Reject the request with 429 when the caller is over quota."""
    retry_after = await policy.check(request.url.path, ctx)
    if retry_after is not None:
        logger.info(f"[ratelimit] user_id={ctx.user_id} retry_after={retry_after.seconds}s")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests, please try again later",
            headers={"Retry-After": str(retry_after.seconds)},
        )
