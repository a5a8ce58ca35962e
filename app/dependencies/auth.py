from __future__ import annotations

"""
Session, tenant and role guards
-------------------------------
Centralized FastAPI dependencies so routers never re-implement the same
cookie/session checks. The access gate only checks that a session cookie is
present; these dependencies are where the token is actually validated, by
asking the Supabase auth server who owns it.

Exports
- get_settings(request): settings the running app was built with
- get_supabase_auth(...): auth-server client for those settings
- require_auth: AuthContext for the cookie's user, else 401
- require_tenant: same, plus a tenant in the user's metadata, else 403
- require_tenant_admin: same, plus an owner/admin membership, else 403
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from loguru import logger

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import (
    AccessDeniedException,
    AppException,
    AuthRequiredException,
    UpstreamAuthException,
)
from app.services.supabase_auth import (
    SupabaseAuthClient,
    SupabaseAuthError,
    SupabaseUnavailableError,
)

TENANT_ADMIN_ROLES = frozenset({"owner", "admin"})


@dataclass(frozen=True)
class AuthContext:
    access_token: str
    user_id: str
    tenant_id: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    user: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


def _claim(user: Dict[str, Any], key: str) -> Optional[str]:
    """`app_metadata[key]`, falling back to `user_metadata[key]`."""
    for bag in ("app_metadata", "user_metadata"):
        value = (user.get(bag) or {}).get(key)
        if value is not None:
            return str(value)
    return None


def context_from_user(access_token: str, user: Dict[str, Any]) -> AuthContext:
    return AuthContext(
        access_token=access_token,
        user_id=str(user["id"]),
        tenant_id=_claim(user, "tenant_id"),
        role=_claim(user, "role"),
        email=user.get("email"),
        user=user,
    )


def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or default_settings


def get_supabase_auth(app_settings: Settings = Depends(get_settings)) -> SupabaseAuthClient:
    if not app_settings.SUPABASE_URL or not app_settings.SUPABASE_ANON_KEY:
        logger.error("Missing Supabase configuration (SUPABASE_URL / SUPABASE_ANON_KEY)")
        raise UpstreamAuthException("Configuration indisponible.")
    return SupabaseAuthClient.from_settings(app_settings)


async def require_auth(
    request: Request,
    app_settings: Settings = Depends(get_settings),
    supabase: SupabaseAuthClient = Depends(get_supabase_auth),
) -> AuthContext:
    token = request.cookies.get(app_settings.ACCESS_TOKEN_COOKIE_NAME)
    if not token:
        logger.warning("Missing access token cookie")
        raise AuthRequiredException()

    try:
        user = await supabase.get_user(token)
    except SupabaseAuthError as e:
        logger.bind(error=e.message).warning("Invalid session")
        raise AuthRequiredException()
    except SupabaseUnavailableError:
        raise UpstreamAuthException()
    return context_from_user(token, user)


async def require_tenant(ctx: AuthContext = Depends(require_auth)) -> AuthContext:
    if not ctx.tenant_id:
        logger.bind(user_id=ctx.user_id).warning("Missing tenant_id in auth context")
        raise AccessDeniedException()
    return ctx


async def require_tenant_admin(
    ctx: AuthContext = Depends(require_tenant),
    supabase: SupabaseAuthClient = Depends(get_supabase_auth),
) -> AuthContext:
    """Require an `owner` or `admin` membership in the caller's tenant."""
    try:
        membership = await supabase.select_one(
            ctx.access_token,
            "tenant_memberships",
            columns="role",
            filters={"tenant_id": ctx.tenant_id, "user_id": ctx.user_id},
        )
    except SupabaseAuthError as e:
        raise AppException(status_code=400, message=e.message)
    except SupabaseUnavailableError:
        raise UpstreamAuthException()

    role = (membership or {}).get("role")
    if role not in TENANT_ADMIN_ROLES:
        logger.bind(user_id=ctx.user_id, role=role).warning("Forbidden role")
        raise AccessDeniedException()
    return ctx


__all__ = [
    "AuthContext",
    "TENANT_ADMIN_ROLES",
    "context_from_user",
    "get_settings",
    "get_supabase_auth",
    "require_auth",
    "require_tenant",
    "require_tenant_admin",
]
