"""Chat turn orchestration.

One turn: validate -> classify -> retrieve -> build context -> generate (or
fall back) -> score -> append to session -> persist -> record usage.
"""

import logging
import time
import uuid
from collections.abc import Iterable

from backend.legal_assistant.classifier.categories import QueryClassifier
from backend.legal_assistant.db.repositories import DocumentStore, SessionPage
from backend.legal_assistant.errors import (
    DocumentStoreError,
    InvalidInputError,
    SessionStateError,
)
from backend.legal_assistant.llm.client import GenerationGateway
from backend.legal_assistant.llm.prompts import build_system_prompt
from backend.legal_assistant.models.chat import ChatTurnResponse, TurnMetadata
from backend.legal_assistant.models.common import (
    Category,
    FeedbackTag,
    MessageRole,
    SessionStatus,
)
from backend.legal_assistant.models.documents import DocumentRef, LegalDocument
from backend.legal_assistant.models.sessions import ChatSession, MessageMetadata
from backend.legal_assistant.retrieval.confidence import score
from backend.legal_assistant.retrieval.context import build_context
from backend.legal_assistant.retrieval.engine import RetrievalEngine
from backend.legal_assistant.sessions.manager import SessionManager
from backend.legal_assistant.utils.logging import StructuredTurnLogger
from backend.legal_assistant.utils.metrics import PrometheusChatMetrics

logger = logging.getLogger(__name__)


def parse_session_id(session_id: str) -> str:
    """Canonical session id.

    Raises:
        InvalidInputError: If ``session_id`` is not a UUID
    """
    try:
        return str(uuid.UUID(session_id))
    except (ValueError, AttributeError, TypeError) as e:
        raise InvalidInputError(f"invalid session id: {session_id!r}") from e


class ChatService:
    """Runs chat turns and session lifecycle operations for one user at a time."""

    def __init__(
        self,
        *,
        documents: DocumentStore,
        sessions: SessionManager,
        engine: RetrievalEngine,
        gateway: GenerationGateway,
        classifier: QueryClassifier | None = None,
        max_message_length: int = 2000,
        history_window: int = 10,
        context_char_budget: int = 1000,
        category_instructions: dict[str, str] | None = None,
        language: str = "ar",
        metrics: PrometheusChatMetrics | None = None,
    ) -> None:
        self._documents = documents
        self._sessions = sessions
        self._engine = engine
        self._gateway = gateway
        self._classifier = classifier or QueryClassifier(engine)
        self._max_message_length = max_message_length
        self._history_window = history_window
        self._context_char_budget = context_char_budget
        self._category_instructions = category_instructions or {}
        self._language = language
        self._metrics = metrics or PrometheusChatMetrics()
        self._turn_logger = StructuredTurnLogger()

    def _validate_message(self, message: str) -> str:
        text = message.strip() if isinstance(message, str) else ""
        if not text:
            raise InvalidInputError("message must not be empty")
        if len(text) > self._max_message_length:
            raise InvalidInputError(
                f"message exceeds {self._max_message_length} characters ({len(text)})"
            )
        return text

    async def handle_message(
        self,
        user_id: str,
        message: str,
        *,
        session_id: str | None = None,
        category: Category | None = None,
    ) -> ChatTurnResponse:
        """Answer one chat message.

        Args:
            user_id: Caller (session owner)
            message: User question
            session_id: Session to continue; a new session is created when None
            category: Caller-selected category (skips inference)

        Returns:
            ChatTurnResponse with a non-empty message

        Raises:
            InvalidInputError: Empty/oversized message or malformed session id
            SessionStateError: Session is no longer active
            NotFoundError: Session absent or owned by another user
            InternalError: Session persistence failed
        """
        start = time.perf_counter()

        # Input validation happens before any retrieval work
        text = self._validate_message(message)
        session: ChatSession | None = None
        if session_id is not None:
            session = await self._sessions.load(parse_session_id(session_id), user_id)
            if session.status != SessionStatus.active:
                raise SessionStateError(f"session {session.session_id} is {session.status.value}")

        classification = await self._classifier.classify(text, category)
        article_number = classification.article.number if classification.article else None

        if session is None:
            session = self._sessions.create(
                user_id, classification.effective_category, title=text
            )
            logger.info(f"[chat] new session_id={session.session_id} user_id={user_id}")

        self._sessions.append_message(session, MessageRole.user, text)

        search_category = classification.category
        if search_category == Category.general:
            search_category = None
        documents = await self._engine.search(text, search_category)

        context = build_context(
            documents,
            article_number,
            char_budget=self._context_char_budget,
            language=self._language,
        )
        system_prompt = build_system_prompt(
            classification.category, self._category_instructions, self._language
        )

        result = await self._gateway.generate(
            system_prompt=system_prompt,
            context=context,
            history=session.recent_messages(self._history_window),
            documents=documents,
            article_number=article_number,
        )

        confidence = score(len(documents), len(context))
        processing_time_ms = (time.perf_counter() - start) * 1000

        reply = self._sessions.append_message(
            session,
            MessageRole.assistant,
            result.text,
            metadata=MessageMetadata(
                confidence=confidence,
                processing_time_ms=processing_time_ms,
                tokens=result.tokens,
                model=result.model,
                source=result.source,
            ),
            relevant_documents=[d.document_id for d in documents],
        )

        await self._sessions.save(session)
        await self._record_usage(documents, article_number)
        self._metrics.inc_turn(result.source.value)

        self._turn_logger.log_turn(
            session_id=session.session_id,
            category=classification.effective_category,
            article_number=article_number,
            documents_found=len(documents),
            source=result.source,
            confidence=confidence,
            latency_ms=processing_time_ms,
        )

        return ChatTurnResponse(
            session_id=session.session_id,
            message=result.text,
            relevant_documents=[DocumentRef.from_document(d) for d in documents],
            confidence=confidence,
            timestamp=reply.timestamp,
            metadata=TurnMetadata(
                processing_time_ms=processing_time_ms,
                documents_found=len(documents),
                source=result.source,
                category=classification.effective_category,
                article_number=article_number,
            ),
        )

    async def _record_usage(self, documents: list[LegalDocument], article_number: str | None) -> None:
        # Usage counters are best effort; the answer has already been persisted
        for document in documents:
            try:
                await self._documents.increment_usage(document.document_id, article_number)
            except DocumentStoreError as e:
                logger.warning(f"[chat] usage update failed document_id={document.document_id}: {e}")

    async def get_session(self, user_id: str, session_id: str) -> ChatSession:
        return await self._sessions.load(parse_session_id(session_id), user_id)

    async def list_sessions(
        self,
        user_id: str,
        *,
        status: SessionStatus | None = SessionStatus.active,
        category: Category | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> SessionPage:
        return await self._sessions.list_for_user(
            user_id, status=status, category=category, page=page, limit=limit
        )

    async def complete_session(self, user_id: str, session_id: str) -> ChatSession:
        session = await self.get_session(user_id, session_id)
        self._sessions.complete(session)
        await self._sessions.save(session)
        return session

    async def archive_session(self, user_id: str, session_id: str) -> ChatSession:
        session = await self.get_session(user_id, session_id)
        self._sessions.archive(session)
        await self._sessions.save(session)
        return session

    async def delete_session(self, user_id: str, session_id: str) -> None:
        """Soft-delete a session; deleting it again is a no-op."""
        session = await self._sessions.load(
            parse_session_id(session_id), user_id, include_deleted=True
        )
        if self._sessions.soft_delete(session):
            await self._sessions.save(session)

    async def rate_session(
        self,
        user_id: str,
        session_id: str,
        rating: int,
        comment: str = "",
        categories: Iterable[FeedbackTag] = (),
    ) -> ChatSession:
        session = await self.get_session(user_id, session_id)
        self._sessions.rate(session, rating, comment, categories)
        await self._sessions.save(session)
        return session
