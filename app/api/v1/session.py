"""
Session API Endpoints
=====================

Sets and clears the session cookie the route gate looks for.

Route prefix: /auth

Endpoints:
    POST   /auth/session - Verify the bearer token and set the cookie
    DELETE /auth/session - Clear the cookie (sign out)
"""

import logging

from fastapi import APIRouter, Response

from app.config import settings
from app.dependencies import BearerCredentials, CurrentIdentity
from app.schemas.todo import ErrorResponse, SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/session",
    summary="Start a session",
    response_model=SuccessResponse,
    responses={401: {"model": ErrorResponse}},
)
async def start_session(
    response: Response,
    credentials: BearerCredentials,
    user_id: CurrentIdentity,
):
    """
    POST /auth/session

    The cookie carries the bearer token. The route gate only checks that
    it is present; API calls still need the Authorization header.
    """
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=credentials.credentials,
        max_age=settings.SESSION_COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )
    logger.info("session_started user=%s", user_id)
    return {"success": True}


@router.delete(
    "/session",
    summary="End the session",
    response_model=SuccessResponse,
)
async def end_session(response: Response):
    """DELETE /auth/session"""
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
    return {"success": True}
