from __future__ import annotations

from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.types import ASGIApp

from app.core.access_gate import AccessPolicy, GateDecision, decide, default_policy


class AccessGateMiddleware(BaseHTTPMiddleware):
    """Session gate applied to every HTTP request before routing.

    Blocked prefixes answer 403 with a JSON error, unauthenticated requests to
    protected paths are redirected to the login page, and the login page
    redirects home when a session cookie is already present.
    Non-HTTP scopes are passed through untouched by `BaseHTTPMiddleware`.
    """

    def __init__(self, app: ASGIApp, *, policy: Optional[AccessPolicy] = None) -> None:
        super().__init__(app)
        self.policy = policy or default_policy()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        token = request.cookies.get(self.policy.cookie_name)
        decision = decide(request.url.path, bool(token), self.policy)

        if decision is GateDecision.BLOCK:
            return JSONResponse({"error": self.policy.blocked_message}, status_code=403)
        if decision is GateDecision.REDIRECT_LOGIN:
            return self._redirect(request, self.policy.login_path)
        if decision is GateDecision.REDIRECT_HOME:
            return self._redirect(request, self.policy.home_path)
        return await call_next(request)

    @staticmethod
    def _redirect(request: Request, path: str) -> RedirectResponse:
        url = request.url.replace(path=path, query="", fragment="")
        return RedirectResponse(str(url), status_code=307)


__all__ = ["AccessGateMiddleware"]
