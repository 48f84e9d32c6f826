"""
Common Dependencies
===================

Shared dependencies used across the application.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.errors import UnauthorizedError
from app.services.document_store import DocumentStore, get_document_store
from app.services.identity import IdentityVerifier, get_identity_verifier
from app.services.todo_service import TodoService

logger = logging.getLogger(__name__)

# Security scheme for bearer authentication
security = HTTPBearer(auto_error=False)

Store = Annotated[DocumentStore, Depends(get_document_store)]
Verifier = Annotated[IdentityVerifier, Depends(get_identity_verifier)]
BearerCredentials = Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]


def get_todo_service(store: Store) -> TodoService:
    """Build a TodoService over the configured document store."""
    return TodoService(store)


async def _resolve_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
    verifier: IdentityVerifier,
) -> Optional[str]:
    if credentials is None or not credentials.credentials:
        return None

    user_id = await verifier.verify(credentials.credentials)
    if user_id is not None:
        # Picked up by the transaction middleware
        request.state.user_id = user_id
    return user_id


async def get_current_identity_optional(
    request: Request,
    credentials: BearerCredentials,
    verifier: Verifier,
) -> Optional[str]:
    """
    Get the caller's user id if a valid bearer token was sent, None otherwise.

    An invalid token is treated the same as no token.
    """
    return await _resolve_identity(request, credentials, verifier)


async def get_current_identity(
    request: Request,
    credentials: BearerCredentials,
    verifier: Verifier,
) -> str:
    """
    Get the caller's user id.

    Raises 401 if no token was sent or it failed verification.
    """
    if credentials is None:
        raise UnauthorizedError(details="Missing bearer token")

    user_id = await _resolve_identity(request, credentials, verifier)
    if user_id is None:
        raise UnauthorizedError(details="Invalid or expired token")

    return user_id


# Type aliases for route signatures
CurrentIdentity = Annotated[str, Depends(get_current_identity)]
CurrentIdentityOptional = Annotated[Optional[str], Depends(get_current_identity_optional)]
Todos = Annotated[TodoService, Depends(get_todo_service)]
