"""
Route Gate
==========

Redirects page requests based only on whether a session cookie is
present. The cookie is never verified here; this is a navigation
pre-filter, not authorization. API endpoints verify bearer tokens
themselves.

    public path | cookie | decision
    ------------+--------+-----------------
    yes         | yes    | redirect home
    yes         | no     | allow
    no          | yes    | allow
    no          | no     | redirect login
"""

from enum import Enum
from typing import Iterable, Optional

from starlette.requests import HTTPConnection
from starlette.responses import RedirectResponse

from app.config import settings


class GateDecision(str, Enum):
    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_HOME = "redirect_home"


def decide(
    path: str,
    has_session: bool,
    public_paths: Optional[Iterable[str]] = None,
) -> GateDecision:
    """Pure gate decision for a request path and cookie presence."""
    if public_paths is None:
        public_paths = settings.public_paths_list
    is_public = path in set(public_paths)

    if is_public and has_session:
        return GateDecision.REDIRECT_HOME
    if not is_public and not has_session:
        return GateDecision.REDIRECT_LOGIN
    return GateDecision.ALLOW


class RouteGateMiddleware:
    """
    Raw ASGI middleware applying ``decide`` to the gated paths only.
    Every other path passes straight through.
    """

    def __init__(
        self,
        app,
        gated_paths: Optional[Iterable[str]] = None,
        public_paths: Optional[Iterable[str]] = None,
        cookie_name: Optional[str] = None,
        login_path: Optional[str] = None,
        home_path: Optional[str] = None,
    ):
        self.app = app
        self.gated_paths = set(gated_paths if gated_paths is not None else settings.gated_paths_list)
        self.public_paths = set(public_paths if public_paths is not None else settings.public_paths_list)
        self.cookie_name = cookie_name or settings.SESSION_COOKIE_NAME
        self.login_path = login_path or settings.LOGIN_PATH
        self.home_path = home_path or settings.HOME_PATH

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope.get("path") not in self.gated_paths:
            await self.app(scope, receive, send)
            return

        has_session = bool(HTTPConnection(scope).cookies.get(self.cookie_name))
        decision = decide(scope["path"], has_session, self.public_paths)

        if decision is GateDecision.ALLOW:
            await self.app(scope, receive, send)
            return

        target = self.home_path if decision is GateDecision.REDIRECT_HOME else self.login_path
        response = RedirectResponse(url=target, status_code=307)
        await response(scope, receive, send)
