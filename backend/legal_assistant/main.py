"""FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.legal_assistant.api.dependencies import get_container, init_storage, shutdown_storage
from backend.legal_assistant.api.routes.chat import router as chat_router
from backend.legal_assistant.api.routes.documents import router as documents_router
from backend.legal_assistant.api.routes.health import router as health_router
from backend.legal_assistant.api.routes.metrics import router as metrics_router
from backend.legal_assistant.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    await init_storage(get_container(), settings)
    logger.info("Legal Assistant API started")
    yield
    await shutdown_storage()


app = FastAPI(title="Legal Assistant API", version="0.1.0", lifespan=lifespan)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(chat_router, tags=["chat"])
app.include_router(documents_router, tags=["documents"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Legal Assistant API", "version": "0.1.0"}
