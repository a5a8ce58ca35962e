"""
🧭 Oniix Admin • API Router Aggregator
=====================================

Composes the auth and tenant routers under one router, mounted at `/api` by
`app.main.create_app`.

Security notes
--------------
- The access gate runs before any of these routes; session validation and
  tenant/role checks live in `app.dependencies.auth`.
"""

from fastapi import APIRouter

from .auth import router as auth_router
from .tenant import router as tenant_router


def build_api_router() -> APIRouter:
    api = APIRouter()
    api.include_router(auth_router)
    api.include_router(tenant_router)
    return api


router = build_api_router()

__all__ = ["router", "build_api_router", "auth_router", "tenant_router"]
