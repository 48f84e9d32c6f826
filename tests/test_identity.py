"""
Identity Verifier Tests
=======================

Tests for JWT and Firebase token verification. The Firebase checks
patch google-auth's verification call; no network is used.
"""

import time
from datetime import timedelta

import pytest
from google.auth import exceptions as google_auth_exceptions
from jose import jwt

from app.config import settings
from app.core.security import create_access_token
from app.services import identity
from app.services.identity import FirebaseIdentityVerifier, JWTIdentityVerifier

PROJECT = "todo-tracker-test"


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_jwt_valid_token():
    verifier = JWTIdentityVerifier()

    assert await verifier.verify(create_access_token("alice")) == "alice"


@pytest.mark.asyncio
async def test_jwt_expired_token():
    token = create_access_token("alice", expires_delta=timedelta(minutes=-5))

    assert await JWTIdentityVerifier().verify(token) is None


@pytest.mark.asyncio
async def test_jwt_wrong_secret():
    token = jwt.encode(
        {"sub": "alice", "type": "access"},
        "some-other-secret-that-is-long-enough-123",
        algorithm=settings.JWT_ALGORITHM,
    )

    assert await JWTIdentityVerifier().verify(token) is None


@pytest.mark.asyncio
async def test_jwt_requires_access_type():
    token = jwt.encode(
        {"sub": "alice", "type": "refresh"},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

    assert await JWTIdentityVerifier().verify(token) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
async def test_jwt_malformed_tokens(token):
    assert await JWTIdentityVerifier().verify(token) is None


# ---------------------------------------------------------------------------
# Firebase
# ---------------------------------------------------------------------------

def _patch_verify(monkeypatch, result=None, error=None, delay=0.0):
    calls = []

    def fake_verify(token, request, audience=None, clock_skew_in_seconds=0):
        calls.append((token, audience))
        if delay:
            time.sleep(delay)
        if error is not None:
            raise error
        return result

    monkeypatch.setattr(identity.google_id_token, "verify_firebase_token", fake_verify)
    return calls


@pytest.mark.asyncio
async def test_firebase_valid_token(monkeypatch):
    calls = _patch_verify(monkeypatch, result={
        "iss": f"https://securetoken.google.com/{PROJECT}",
        "aud": PROJECT,
        "user_id": "uid-123",
        "sub": "uid-123",
    })

    user_id = await FirebaseIdentityVerifier(project_id=PROJECT).verify("id-token")

    assert user_id == "uid-123"
    assert calls == [("id-token", PROJECT)]


@pytest.mark.asyncio
async def test_firebase_wrong_issuer(monkeypatch):
    _patch_verify(monkeypatch, result={
        "iss": "https://securetoken.google.com/another-project",
        "user_id": "uid-123",
    })

    assert await FirebaseIdentityVerifier(project_id=PROJECT).verify("id-token") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        ValueError("Token expired"),
        google_auth_exceptions.TransportError("certs unavailable"),
    ],
)
async def test_firebase_rejections_return_none(monkeypatch, error):
    _patch_verify(monkeypatch, error=error)

    assert await FirebaseIdentityVerifier(project_id=PROJECT).verify("id-token") is None


@pytest.mark.asyncio
async def test_firebase_timeout_returns_none(monkeypatch):
    _patch_verify(monkeypatch, result={"user_id": "uid-123"}, delay=0.3)

    verifier = FirebaseIdentityVerifier(project_id=PROJECT, timeout=0.05)

    assert await verifier.verify("id-token") is None


@pytest.mark.asyncio
async def test_firebase_without_project_rejects(monkeypatch):
    monkeypatch.setattr(settings, "FIREBASE_PROJECT_ID", None)
    calls = _patch_verify(monkeypatch, result={"user_id": "uid-123"})

    assert await FirebaseIdentityVerifier().verify("id-token") is None
    assert calls == []
