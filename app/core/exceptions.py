# app/core/exceptions.py
from __future__ import annotations

"""
Oniix Admin — Application Exceptions
====================================
A thin layer on top of FastAPI's `HTTPException` carrying a user-facing
`message` and an optional typed `code`, rendered by
`app.core.exception_handlers` as `{"ok": false, "error": <message>}`.

The access gate and the audit recorder never raise; these exceptions are for
the auth dependencies and routers.

Usage
-----
    raise AccessDeniedException()
    raise AppException(status_code=400, message="Email et mot de passe requis")
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "AuthRequiredException",
    "AccessDeniedException",
    "UpstreamAuthException",
]

SESSION_EXPIRED_MESSAGE = "Votre session a expiré. Veuillez vous reconnecter."
ACCESS_DENIED_MESSAGE = "Accès refusé."


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception.

    Attributes
    -----------
    status_code : int
        HTTP status code.
    message : str
        Human-readable error message (also used as `detail`).
    code : int
        Internal error code. Defaults to `status_code`.
    details : Any
        Optional machine-readable context (never includes secrets).
    """

    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: Optional[int] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.details: Optional[Any] = details

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"ok": False, "error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


# ──────────────────────────────────────────────────────────────
# 🔑 Session / authorization
# ──────────────────────────────────────────────────────────────
class AuthRequiredException(AppException):
    """Missing, invalid or expired session (401)."""

    def __init__(self, message: str = SESSION_EXPIRED_MESSAGE) -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, message=message)


class AccessDeniedException(AppException):
    """Authenticated, but outside the tenant or role required (403)."""

    def __init__(self, message: str = ACCESS_DENIED_MESSAGE) -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, message=message)


class UpstreamAuthException(AppException):
    """The auth server could not be reached or answered unexpectedly (502)."""

    def __init__(self, message: str = "Service d'authentification indisponible.") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, message=message)
