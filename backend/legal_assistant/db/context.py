"""Request context for ownership enforcement."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Request context containing the caller's identity.

    Used to scope every session read and write to its owner.
    """

    user_id: str
