"""Session manager - conversation state machine.

States: active -> {completed, archived, deleted}. Terminal states are final.
Requesting the state a session is already in is a no-op; any other
transition out of a terminal state raises SessionStateError.
"""

import logging
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from backend.legal_assistant.db.repositories import SessionPage, SessionStore
from backend.legal_assistant.errors import (
    InternalError,
    NotFoundError,
    SessionStateError,
    SessionStoreError,
)
from backend.legal_assistant.models.common import (
    TERMINAL_STATUSES,
    Category,
    FeedbackTag,
    MessageRole,
    SessionStatus,
)
from backend.legal_assistant.models.sessions import (
    ChatSession,
    Message,
    MessageMetadata,
    SessionFeedback,
)
from backend.legal_assistant.sessions.analytics import compute_analytics

logger = logging.getLogger(__name__)

TITLE_LENGTH = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_title(first_message: str) -> str:
    """Session title from the opening user message."""
    text = first_message.strip()
    if len(text) > TITLE_LENGTH:
        return text[:TITLE_LENGTH] + "..."
    return text


class SessionManager:
    """Owns session lifecycle and the append-only message history."""

    def __init__(self, store: SessionStore, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock

    def create(self, user_id: str, category: Category | None = None, title: str = "") -> ChatSession:
        """New active session (persisted on the first save)."""
        now = self._clock()
        return ChatSession(
            session_id=str(uuid.uuid4()),
            user_id=user_id,
            title=make_title(title) if title else "",
            category=category or Category.general,
            created_at=now,
            last_activity=now,
        )

    def append_message(
        self,
        session: ChatSession,
        role: MessageRole,
        content: str,
        metadata: MessageMetadata | None = None,
        relevant_documents: Iterable[str] = (),
    ) -> Message:
        """Append a message to the tail of the history.

        Timestamps never go backwards even if the clock does. Analytics are
        recomputed from the full list.

        Raises:
            SessionStateError: If the session is not active
        """
        if session.status != SessionStatus.active:
            raise SessionStateError(
                f"cannot add messages to a {session.status.value} session"
            )

        now = self._clock()
        if session.messages and now < session.messages[-1].timestamp:
            now = session.messages[-1].timestamp

        message = Message(
            role=role,
            content=content,
            timestamp=now,
            metadata=metadata,
            relevant_documents=list(relevant_documents),
        )
        session.messages.append(message)
        session.analytics = compute_analytics(session.messages)
        session.last_activity = now
        return message

    def _transition(self, session: ChatSession, target: SessionStatus) -> bool:
        if session.status == target:
            return False
        if session.status in TERMINAL_STATUSES:
            raise SessionStateError(
                f"cannot move a {session.status.value} session to {target.value}"
            )

        logger.info(
            f"[session] session_id={session.session_id} {session.status.value} -> {target.value}"
        )
        session.status = target
        session.last_activity = max(self._clock(), session.last_activity)
        return True

    def complete(self, session: ChatSession) -> None:
        if self._transition(session, SessionStatus.completed):
            session.completed_at = session.last_activity

    def archive(self, session: ChatSession) -> None:
        self._transition(session, SessionStatus.archived)

    def soft_delete(self, session: ChatSession) -> bool:
        return self._transition(session, SessionStatus.deleted)

    def rate(
        self,
        session: ChatSession,
        rating: int,
        comment: str = "",
        categories: Iterable[FeedbackTag] = (),
    ) -> None:
        """Attach user feedback; any state but deleted may be rated."""
        if session.status == SessionStatus.deleted:
            raise SessionStateError("cannot rate a deleted session")

        session.feedback = SessionFeedback(
            rating=rating,
            comment=comment,
            categories=list(categories),
            rated_at=self._clock(),
        )

    async def load(
        self, session_id: str, user_id: str, *, include_deleted: bool = False
    ) -> ChatSession:
        """Load a session owned by ``user_id``.

        Soft-deleted sessions are hidden unless ``include_deleted`` is set.

        Raises:
            NotFoundError: If absent, owned by someone else, or soft-deleted
            InternalError: If the store fails
        """
        try:
            session = await self._store.load(session_id, user_id)
        except SessionStoreError as e:
            logger.error(f"[session] load failed session_id={session_id}", exc_info=True)
            raise InternalError("session store unavailable") from e

        if session is None or (session.status == SessionStatus.deleted and not include_deleted):
            raise NotFoundError(f"session {session_id} not found")
        return session

    async def save(self, session: ChatSession) -> None:
        """Persist the whole session document.

        Raises:
            InternalError: If the store fails
        """
        try:
            await self._store.save(session)
        except SessionStoreError as e:
            logger.error(f"[session] save failed session_id={session.session_id}", exc_info=True)
            raise InternalError("session store unavailable") from e

    async def list_for_user(
        self,
        user_id: str,
        *,
        status: SessionStatus | None = SessionStatus.active,
        category: Category | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> SessionPage:
        try:
            return await self._store.list_for_user(
                user_id, status=status, category=category, page=page, limit=limit
            )
        except SessionStoreError as e:
            logger.error(f"[session] list failed user_id={user_id}", exc_info=True)
            raise InternalError("session store unavailable") from e
