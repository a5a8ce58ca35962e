# tests/fixtures/supabase.py

"""
🧪 Fake Supabase (GoTrue + PostgREST) behind `httpx.MockTransport`.

Only the endpoints the admin backend calls are implemented:
- POST /auth/v1/token?grant_type=password
- POST /auth/v1/signup
- GET  /auth/v1/user
- GET  /rest/v1/tenant_memberships, /rest/v1/profiles
- POST /rest/v1/tenants, /rest/v1/tenant_memberships (service role)
- PUT  /auth/v1/admin/users/<id> (service role)
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx


def _eq(value: Optional[str]) -> Optional[str]:
    if value and value.startswith("eq."):
        return value[3:]
    return value


class FakeSupabase:
    def __init__(self) -> None:
        self.accounts: Dict[str, Tuple[str, Dict[str, Any]]] = {}
        self.users: Dict[str, Dict[str, Any]] = {}
        self.memberships: Dict[Tuple[str, str], str] = {}
        self.profiles: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.tenants: List[Dict[str, Any]] = []
        self.admin_updates: Dict[str, Dict[str, Any]] = {}
        self.service_role_key: Optional[str] = None
        self.confirm_email = False
        self.missing_tables: set = set()
        self.down = False

    # ── Seeding helpers ──────────────────────────────────────
    def add_user(
        self,
        token: str,
        *,
        user_id: str,
        email: Optional[str] = None,
        tenant_id: Optional[str] = None,
        role: Optional[str] = None,
        in_user_metadata: bool = False,
    ) -> Dict[str, Any]:
        claims = {k: v for k, v in {"tenant_id": tenant_id, "role": role}.items() if v is not None}
        user = {
            "id": user_id,
            "email": email,
            "app_metadata": {} if in_user_metadata else claims,
            "user_metadata": claims if in_user_metadata else {},
        }
        self.users[token] = user
        return user

    def add_account(self, email: str, password: str, *, access_token: str, refresh_token: str) -> None:
        self.accounts[email] = (password, {"access_token": access_token, "refresh_token": refresh_token})

    def add_membership(self, tenant_id: str, user_id: str, role: str) -> None:
        self.memberships[(tenant_id, user_id)] = role

    # ── Transport ────────────────────────────────────────────
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def _caller(self, request: httpx.Request) -> Optional[Dict[str, Any]]:
        auth = request.headers.get("authorization", "")
        return self.users.get(auth.removeprefix("Bearer ").strip())

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        params = request.url.params

        if path == "/auth/v1/token" and request.method == "POST":
            body = json.loads(request.content or b"{}")
            account = self.accounts.get(body.get("email"))
            if not account or account[0] != body.get("password"):
                return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"})
            return httpx.Response(200, json={**account[1], "token_type": "bearer"})

        if path == "/auth/v1/signup" and request.method == "POST":
            return self._signup(json.loads(request.content or b"{}"))

        if self._is_admin(request):
            return self._admin(request)

        if path == "/auth/v1/user":
            user = self._caller(request)
            if user is None:
                return httpx.Response(401, json={"msg": "invalid JWT: unable to parse or verify signature"})
            return httpx.Response(200, json=user)

        if path.startswith("/rest/v1/"):
            if self._caller(request) is None:
                return httpx.Response(401, json={"message": "JWT expired"})
            table = path.rsplit("/", 1)[-1]
            if table == "tenant_memberships":
                key = (_eq(params.get("tenant_id")), _eq(params.get("user_id")))
                role = self.memberships.get(key)
                return httpx.Response(200, json=[{"role": role}] if role else [])
            if table == "profiles":
                profile = self.profiles.get(_eq(params.get("user_id")))
                return httpx.Response(200, json=[profile] if profile else [])

        return httpx.Response(404, json={"message": "not found"})

    # ── Signup / admin ───────────────────────────────────────
    def _signup(self, body: Dict[str, Any]) -> httpx.Response:
        email = body.get("email")
        if email in self.accounts:
            return httpx.Response(422, json={"code": 422, "msg": "User already registered"})
        user_id = f"user-{len(self.accounts) + 1}"
        access, refresh = f"acc-{user_id}", f"ref-{user_id}"
        self.add_account(email, body.get("password"), access_token=access, refresh_token=refresh)
        user = self.add_user(access, user_id=user_id, email=email)
        if self.confirm_email:
            return httpx.Response(200, json={**user, "confirmation_sent_at": "2026-01-01T00:00:00Z"})
        confirmed = {**user, "email_confirmed_at": "2026-01-01T00:00:00Z"}
        return httpx.Response(200, json={"access_token": access, "refresh_token": refresh, "user": confirmed})

    def _is_admin(self, request: httpx.Request) -> bool:
        return bool(self.service_role_key) and request.headers.get("authorization") == f"Bearer {self.service_role_key}"

    def _admin(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content or b"{}")

        if request.method == "PUT" and path.startswith("/auth/v1/admin/users/"):
            user_id = path.rsplit("/", 1)[-1]
            self.admin_updates[user_id] = body.get("app_metadata") or {}
            for user in self.users.values():
                if user["id"] == user_id:
                    user["app_metadata"] = dict(self.admin_updates[user_id])
            return httpx.Response(200, json={"id": user_id})

        if request.method == "POST" and path.startswith("/rest/v1/"):
            table = path.rsplit("/", 1)[-1]
            if table in self.missing_tables:
                return httpx.Response(404, json={"message": f"relation \"public.{table}\" does not exist"})
            if table == "tenants":
                row = {"id": f"tenant-{len(self.tenants) + 1}", **body}
                self.tenants.append(row)
                return httpx.Response(201, json=[row])
            if table == "tenant_memberships":
                self.add_membership(body["tenant_id"], body["user_id"], body["role"])
                return httpx.Response(201, json=[body])

        return httpx.Response(404, json={"message": "not found"})


def session_cookie(token: str, name: str = "oniix-access-token") -> Dict[str, str]:
    """Raw Cookie header carrying the access token."""
    return {"Cookie": f"{name}={token}"}
