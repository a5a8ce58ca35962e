"""
🔐 Oniix Admin • Auth routes
============================

- POST /auth/login   → password grant against Supabase; sets session cookies
- POST /auth/signup  → creates the account (and its tenant), then logs in
- POST /auth/logout  → clears session cookies
- GET  /auth/me      → current user, tenant and profile for the dashboard shell

`login`, `signup` and `logout` sit on the gate's public allow-list; `me` is
protected by the gate (cookie presence) and validated here against the auth
server.
"""

from __future__ import annotations

from typing import Optional, Tuple

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from app.api.http_utils import json_no_store
from app.core.config import Settings
from app.core.cookies import clear_auth_cookies, set_auth_cookies
from app.core.exceptions import AppException, UpstreamAuthException
from app.dependencies.auth import AuthContext, get_settings, get_supabase_auth, require_auth
from app.schemas.auth import LoginRequest, MeResponse, MeUser, SignupRequest
from app.services.supabase_auth import (
    SupabaseAuthClient,
    SupabaseAuthError,
    SupabaseUnavailableError,
)

router = APIRouter(prefix="/auth", tags=["Auth"])

MIN_PASSWORD_LENGTH = 8
DEFAULT_TENANT_NAME = "Mon tenant"


async def _password_session(supabase: SupabaseAuthClient, email: str, password: str) -> Tuple[str, str]:
    """Password grant → `(access_token, refresh_token)`, mapped to HTTP errors."""
    try:
        session = await supabase.sign_in_with_password(email, password)
    except SupabaseAuthError as e:
        raise AppException(status_code=401, message=e.message)
    except SupabaseUnavailableError:
        raise UpstreamAuthException()

    access = session.get("access_token")
    refresh = session.get("refresh_token")
    if not access or not refresh:
        logger.error("Password grant returned no session tokens")
        raise AppException(status_code=500, message="Session introuvable")
    return access, refresh


async def _provision_tenant(
    supabase: SupabaseAuthClient, user_id: str, tenant_name: Optional[str]
) -> Optional[str]:
    """Create the new user's tenant and owner membership (service role only).

    Best-effort: the account exists already, so any failure here is logged
    and signup carries on without a tenant.
    """
    if not supabase.has_admin:
        logger.bind(user_id=user_id).info("Tenant provisioning skipped (no service role key)")
        return None

    log = logger.bind(user_id=user_id)
    try:
        tenant = await supabase.admin_insert(
            "tenants",
            {"name": (tenant_name or "").strip() or DEFAULT_TENANT_NAME, "created_by": user_id},
        )
    except (SupabaseAuthError, SupabaseUnavailableError) as e:
        log.bind(error=str(e)).warning("Tenant creation failed")
        return None
    tenant_id = str((tenant or {}).get("id") or "") or None
    if not tenant_id:
        log.warning("Tenant creation returned no id")
        return None

    log = log.bind(tenant_id=tenant_id)
    try:
        await supabase.admin_insert(
            "tenant_memberships", {"tenant_id": tenant_id, "user_id": user_id, "role": "owner"}
        )
    except (SupabaseAuthError, SupabaseUnavailableError) as e:
        log.bind(error=str(e)).warning("Owner membership creation failed")
    try:
        await supabase.admin_update_user(user_id, app_metadata={"tenant_id": tenant_id, "role": "tenant_admin"})
    except (SupabaseAuthError, SupabaseUnavailableError) as e:
        log.bind(error=str(e)).warning("Tenant claim update failed")
    return tenant_id


@router.post("/login")
async def login(
    payload: LoginRequest,
    app_settings: Settings = Depends(get_settings),
    supabase: SupabaseAuthClient = Depends(get_supabase_auth),
) -> JSONResponse:
    if not payload.email or not payload.password:
        raise AppException(status_code=400, message="Email et mot de passe requis")

    access, refresh = await _password_session(supabase, payload.email, payload.password)

    resp = json_no_store({"ok": True})
    set_auth_cookies(resp, access, refresh, app_settings)
    return resp


@router.post("/signup")
async def signup(
    payload: SignupRequest,
    app_settings: Settings = Depends(get_settings),
    supabase: SupabaseAuthClient = Depends(get_supabase_auth),
) -> JSONResponse:
    if not payload.email or not payload.password:
        raise AppException(status_code=400, message="Email et mot de passe requis")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise AppException(status_code=400, message="Mot de passe trop court (min 8 caractères)")

    try:
        user = await supabase.sign_up(payload.email, payload.password)
    except SupabaseAuthError as e:
        raise AppException(status_code=401, message=e.message)
    except SupabaseUnavailableError:
        raise UpstreamAuthException()

    if user is None:
        return json_no_store({"ok": True, "message": "Compte créé. Vérifie ton email pour confirmer."})

    tenant_id = await _provision_tenant(supabase, str(user["id"]), payload.tenant_name)
    access, refresh = await _password_session(supabase, payload.email, payload.password)

    resp = json_no_store({"ok": True, "tenant_id": tenant_id})
    set_auth_cookies(resp, access, refresh, app_settings)
    return resp


@router.post("/logout")
async def logout(app_settings: Settings = Depends(get_settings)) -> JSONResponse:
    resp = json_no_store({"ok": True})
    clear_auth_cookies(resp, app_settings)
    return resp


@router.get("/me")
async def me(
    ctx: AuthContext = Depends(require_auth),
    supabase: SupabaseAuthClient = Depends(get_supabase_auth),
) -> JSONResponse:
    # Profile is decoration; a failed lookup still returns the session user
    try:
        profile = await supabase.select_one(
            ctx.access_token,
            "profiles",
            columns="full_name,avatar_url",
            filters={"user_id": ctx.user_id},
        )
    except (SupabaseAuthError, SupabaseUnavailableError):
        profile = None
    profile = profile or {}

    body = MeResponse(
        access_token=ctx.access_token,
        user=MeUser(
            id=ctx.user_id,
            email=ctx.email,
            role=ctx.role,
            tenant_id=ctx.tenant_id,
            full_name=profile.get("full_name"),
            avatar_url=profile.get("avatar_url"),
        ),
    )
    return json_no_store(body)
