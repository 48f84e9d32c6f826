"""
Identity Verifier
=================

Turns a bearer token into a user id.

``verify`` never raises: any invalid, expired or unverifiable token,
and any provider failure or timeout, yields ``None``. Callers treat
``None`` exactly like a missing credential.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token

from app.config import settings
from app.core.security import decode_token
from app.utils.helpers import call_with_timeout

logger = logging.getLogger(__name__)


class IdentityVerifier(ABC):
    """Contract for bearer-token verification."""

    @abstractmethod
    async def verify(self, token: str) -> Optional[str]:
        """Return the user id for a valid token, None otherwise."""


class JWTIdentityVerifier(IdentityVerifier):
    """Verifies HS256 tokens minted by ``app.core.security.create_access_token``."""

    async def verify(self, token: str) -> Optional[str]:
        if not token:
            return None

        payload = decode_token(token)
        if payload is None or payload.get("type") != "access":
            logger.warning("token_rejected provider=jwt reason=invalid")
            return None

        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            logger.warning("token_rejected provider=jwt reason=missing_sub")
            return None
        return user_id


class FirebaseIdentityVerifier(IdentityVerifier):
    """
    Verifies Firebase Auth ID tokens.

    Signature, expiry, issuer and audience are checked by google-auth
    against Google's published certificates. The blocking HTTP fetch of
    those certificates runs in a worker thread.
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.project_id = project_id or settings.FIREBASE_PROJECT_ID
        self.timeout = timeout or settings.EXTERNAL_CALL_TIMEOUT_SECONDS
        self._request = google_requests.Request()

    def _verify(self, token: str) -> dict:
        claims = google_id_token.verify_firebase_token(
            token,
            self._request,
            audience=self.project_id,
            clock_skew_in_seconds=5,
        )
        expected_issuer = f"https://securetoken.google.com/{self.project_id}"
        if self.project_id and claims.get("iss") != expected_issuer:
            raise ValueError("Invalid token issuer")
        return claims

    async def verify(self, token: str) -> Optional[str]:
        if not token:
            return None
        if not self.project_id:
            logger.error("token_rejected provider=firebase reason=project_not_configured")
            return None

        try:
            claims = await call_with_timeout(
                asyncio.to_thread(self._verify, token), self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("token_rejected provider=firebase reason=timeout")
            return None
        except (ValueError, google_auth_exceptions.GoogleAuthError) as exc:
            logger.warning("token_rejected provider=firebase reason=%s", exc)
            return None

        user_id = claims.get("user_id") or claims.get("sub")
        if not user_id:
            logger.warning("token_rejected provider=firebase reason=missing_uid")
            return None
        return str(user_id)


# Singleton instance
_identity_verifier: Optional[IdentityVerifier] = None


def get_identity_verifier() -> IdentityVerifier:
    """Get or create the configured identity verifier."""
    global _identity_verifier

    if _identity_verifier is None:
        if settings.AUTH_PROVIDER == "firebase":
            _identity_verifier = FirebaseIdentityVerifier()
        else:
            if settings.is_production:
                logger.warning(
                    "AUTH_PROVIDER=jwt in production; tokens are verified with a shared secret"
                )
            _identity_verifier = JWTIdentityVerifier()

    return _identity_verifier
