"""
Route Gate Tests
================

Tests for cookie-presence redirects on the page paths and for the
session cookie endpoints.
"""

import pytest
from httpx import AsyncClient

from app.core.route_gate import GateDecision, decide

PUBLIC = ["/login", "/signup"]
SESSION = {"Cookie": "session=opaque-value"}


# ---------------------------------------------------------------------------
# Decision table
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "path,has_session,expected",
    [
        ("/login", True, GateDecision.REDIRECT_HOME),
        ("/signup", True, GateDecision.REDIRECT_HOME),
        ("/login", False, GateDecision.ALLOW),
        ("/", True, GateDecision.ALLOW),
        ("/", False, GateDecision.REDIRECT_LOGIN),
    ],
)
def test_decide(path, has_session, expected):
    assert decide(path, has_session, PUBLIC) == expected


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_home_without_cookie_redirects_to_login(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code == 307
    assert response.headers["location"] == "/login"


@pytest.mark.asyncio
async def test_home_with_cookie_is_served(client: AsyncClient):
    response = await client.get("/", headers=SESSION)

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_with_cookie_redirects_home(client: AsyncClient):
    response = await client.get("/login", headers=SESSION)

    assert response.status_code == 307
    assert response.headers["location"] == "/"


@pytest.mark.asyncio
async def test_signup_without_cookie_is_served(client: AsyncClient):
    response = await client.get("/signup")

    assert response.status_code == 200
    assert response.json()["page"] == "signup"


@pytest.mark.asyncio
async def test_cookie_is_not_verified(client: AsyncClient):
    """Any non-empty cookie value counts as a session."""
    response = await client.get("/", headers={"Cookie": "session=not-a-real-token"})

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_other_cookie_names_are_ignored(client: AsyncClient):
    response = await client.get("/", headers={"Cookie": "theme=dark"})

    assert response.status_code == 307


@pytest.mark.asyncio
async def test_api_paths_are_not_gated(client: AsyncClient):
    response = await client.get("/todos")

    assert response.status_code == 200


# ---------------------------------------------------------------------------
# Session endpoints
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_start_session_sets_cookie(client: AsyncClient, auth_headers):
    response = await client.post("/auth/session", headers=auth_headers("alice"))

    assert response.status_code == 200
    assert response.json() == {"success": True}
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("session=")
    assert "HttpOnly" in set_cookie


@pytest.mark.asyncio
async def test_start_session_requires_valid_token(client: AsyncClient):
    response = await client.post(
        "/auth/session", headers={"Authorization": "Bearer garbage"},
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"
    assert "set-cookie" not in response.headers


@pytest.mark.asyncio
async def test_end_session_clears_cookie(client: AsyncClient):
    response = await client.delete("/auth/session")

    assert response.status_code == 200
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("session=")
    assert "Max-Age=0" in set_cookie


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "cookie",
    [
        'prefs={"theme":"dark"}; session=tok',
        "a=b c; session=tok",
        "session=tok; x=[1]",
    ],
)
async def test_session_found_next_to_malformed_cookies(client: AsyncClient, cookie):
    home = await client.get("/", headers={"Cookie": cookie})
    login = await client.get("/login", headers={"Cookie": cookie})

    assert home.status_code == 200
    assert login.status_code == 307
    assert login.headers["location"] == "/"


@pytest.mark.asyncio
async def test_session_cookie_max_age_setting(client: AsyncClient, auth_headers, monkeypatch):
    from app.config import settings

    monkeypatch.setattr(settings, "SESSION_COOKIE_MAX_AGE", 3600)

    response = await client.post("/auth/session", headers=auth_headers("alice"))

    assert response.status_code == 200
    assert "Max-Age=3600" in response.headers["set-cookie"]
