"""Minimal auth dependency.

Stub implementation that reads the user id from a bearer token or uses the
dev default. Real token validation belongs to the account service.
"""

from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.legal_assistant.db.context import RequestContext

# Fixed id used when no Authorization header is sent (local development)
DEV_USER_ID = "00000000-0000-0000-0000-000000000002"


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from authorization header.

    Accepts "Bearer <user_id>"; without a header the dev user is assumed.

    Args:
        authorization: Authorization header (e.g., "Bearer <token>")

    Returns:
        RequestContext with user_id

    Raises:
        HTTPException: If authorization is invalid
    """
    if not authorization:
        return RequestContext(user_id=DEV_USER_ID)

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:].strip()  # Strip "Bearer "
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Empty bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return RequestContext(user_id=token)
