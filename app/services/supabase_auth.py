from __future__ import annotations

"""
Oniix Admin — Supabase auth client (httpx)
==========================================

Thin async wrapper over the Supabase HTTP APIs the admin backend needs:

- GoTrue password grant  → `POST /auth/v1/token?grant_type=password`
- GoTrue signup          → `POST /auth/v1/signup`
- GoTrue current user    → `GET  /auth/v1/user`
- PostgREST row lookups  → `GET  /rest/v1/<table>?...` (as the caller, so RLS applies)
- Tenant provisioning    → `POST /rest/v1/<table>`, `PUT /auth/v1/admin/users/<id>`
  (service role only)

Every call sends the project `apikey`; user-scoped calls add the caller's
bearer token; admin calls authenticate with the service-role key.
Transport problems raise `SupabaseUnavailableError`; auth-server refusals
raise `SupabaseAuthError` carrying the upstream message.
"""

from typing import Any, Dict, Optional

import httpx
from loguru import logger

from app.core.config import Settings


class SupabaseAuthError(Exception):
    """The auth server refused the request (bad credentials, expired session)."""

    def __init__(self, message: str, status_code: int = 401) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SupabaseUnavailableError(Exception):
    """The auth server could not be reached or returned a server error."""


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        for key in ("error_description", "msg", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {resp.status_code}"


class SupabaseAuthClient:
    def __init__(
        self,
        base_url: str,
        anon_key: str,
        *,
        timeout: float = 10.0,
        service_role_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.service_role_key = service_role_key or None
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "SupabaseAuthClient":
        return cls(
            settings.SUPABASE_URL or "",
            settings.SUPABASE_ANON_KEY or "",
            timeout=settings.SUPABASE_TIMEOUT_SECONDS,
            service_role_key=settings.SUPABASE_SERVICE_ROLE_KEY,
            **kwargs,
        )

    @property
    def has_admin(self) -> bool:
        return bool(self.service_role_key)

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        headers = {"apikey": self.anon_key, "Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _admin_headers(self) -> Dict[str, str]:
        if not self.service_role_key:
            raise SupabaseAuthError("Service role key not configured", 500)
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
            "Accept": "application/json",
        }

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.bind(path=path, error=str(e)).error("Supabase request failed")
            raise SupabaseUnavailableError(str(e)) from e
        if resp.status_code >= 500:
            logger.bind(path=path, status=resp.status_code).error("Supabase server error")
            raise SupabaseUnavailableError(_error_message(resp))
        return resp

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """Return the session payload (`access_token`, `refresh_token`, `user`, ...)."""
        resp = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers=self._headers(),
        )
        if resp.status_code >= 400:
            raise SupabaseAuthError(_error_message(resp), resp.status_code)
        return resp.json()

    async def sign_up(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        """Create an account; return the new user, or None while email confirmation is pending.

        GoTrue answers with a full session when auto-confirm is on, and with a
        bare, unconfirmed user object when a confirmation email was sent.
        """
        resp = await self._request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password},
            headers=self._headers(),
        )
        if resp.status_code >= 400:
            raise SupabaseAuthError(_error_message(resp), resp.status_code)
        body = resp.json() or {}
        if body.get("access_token"):
            user = body.get("user") or {}
        elif body.get("email_confirmed_at") or body.get("confirmed_at"):
            user = body
        else:
            return None
        return user if user.get("id") else None

    async def admin_insert(self, table: str, row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Insert `row` with the service role (bypasses RLS); return the stored row."""
        headers = {**self._admin_headers(), "Prefer": "return=representation"}
        resp = await self._request("POST", f"/rest/v1/{table}", json=row, headers=headers)
        if resp.status_code >= 400:
            raise SupabaseAuthError(_error_message(resp), resp.status_code)
        rows = resp.json() if resp.content else []
        return rows[0] if isinstance(rows, list) and rows else None

    async def admin_update_user(self, user_id: str, *, app_metadata: Dict[str, Any]) -> None:
        resp = await self._request(
            "PUT",
            f"/auth/v1/admin/users/{user_id}",
            json={"app_metadata": app_metadata},
            headers=self._admin_headers(),
        )
        if resp.status_code >= 400:
            raise SupabaseAuthError(_error_message(resp), resp.status_code)

    async def get_user(self, access_token: str) -> Dict[str, Any]:
        """Return the GoTrue user owning `access_token`."""
        resp = await self._request("GET", "/auth/v1/user", headers=self._headers(access_token))
        if resp.status_code >= 400:
            raise SupabaseAuthError(_error_message(resp), resp.status_code)
        user = resp.json()
        if not isinstance(user, dict) or not user.get("id"):
            raise SupabaseAuthError("Invalid session")
        return user

    async def select_one(
        self,
        access_token: str,
        table: str,
        *,
        columns: str,
        filters: Dict[str, str],
    ) -> Optional[Dict[str, Any]]:
        """First row of `table` matching equality `filters`, or None."""
        params = {"select": columns, "limit": "1"}
        params.update({k: f"eq.{v}" for k, v in filters.items()})
        resp = await self._request(
            "GET", f"/rest/v1/{table}", params=params, headers=self._headers(access_token)
        )
        if resp.status_code >= 400:
            raise SupabaseAuthError(_error_message(resp), resp.status_code)
        rows = resp.json()
        return rows[0] if isinstance(rows, list) and rows else None


__all__ = [
    "SupabaseAuthClient",
    "SupabaseAuthError",
    "SupabaseUnavailableError",
]
