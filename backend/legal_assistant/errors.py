"""Error taxonomy for the chat turn pipeline."""


class LegalAssistantError(Exception):
    """Base class for all application errors."""

    pass


class InvalidInputError(LegalAssistantError):
    """Malformed or oversized query or identifier, rejected before retrieval."""

    pass


class SessionStateError(InvalidInputError):
    """Requested session transition is not allowed from the current state."""

    pass


class NotFoundError(LegalAssistantError):
    """Referenced session, document or article does not exist."""

    pass


class UpstreamUnavailableError(LegalAssistantError):
    """Generation service timed out or failed.

    Never surfaced to callers: the generation gateway resolves it with the
    fallback synthesizer within the same turn.
    """

    pass


class InternalError(LegalAssistantError):
    """Unexpected failure in retrieval or session persistence."""

    pass


class DocumentStoreError(LegalAssistantError):
    """Document store query or update failed."""

    pass


class SessionStoreError(LegalAssistantError):
    """Session store load or persist failed."""

    pass
