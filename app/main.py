# app/main.py
from __future__ import annotations

"""
# Oniix Admin API — Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the Oniix admin dashboard backend.

## Design Goals
- Deterministic, testable **app factory** (`create_app`) taking an optional
  `Settings`, so gate policies can be injected in tests.
- Explicit **middleware order** (outermost first):
  1) request id → 2) access gate → 3) gzip → routes.
  The request id is outermost so gate warnings carry `request_id`.
- Centralized JSON error shape (`{"ok": false, "error": ...}`).

## Health
- `/healthz` — liveness (on the gate's public allow-list by default).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
import os

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware

from app.core.access_gate import AccessPolicy
from app.core.config import Settings, settings as default_settings
from app.core.exception_handlers import (
    app_exception_handler,
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.core.exceptions import AppException
from app.core.logger import configure_logging
from app.middleware.access_gate import AccessGateMiddleware
from app.middleware.request_id import RequestIDMiddleware


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup:
        - Log a startup banner with the active gate policy.

    Shutdown:
        - Dispose the DB engine if the audit store created one.
    """
    policy: AccessPolicy = app.state.access_policy
    logger.bind(
        blocked=list(policy.blocked_prefixes),
        public=list(policy.public_prefixes),
        audit_store=app.state.settings.AUDIT_STORE,
    ).info("✅ Oniix Admin API starting up")
    try:
        yield
    finally:
        from app.db.session import dispose_engine

        try:
            await dispose_engine()
        except Exception:
            logger.exception("Error disposing DB engine")
        logger.info("🛑 Oniix Admin API shutting down")


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Args:
        app_settings: settings to build from; defaults to the process settings.

    Returns:
        FastAPI: application with gate, error handlers, routers and health check.
    """
    configure_logging()
    app_settings = app_settings or default_settings

    docs = app_settings.ENABLE_DOCS
    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        version=app_settings.VERSION,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.access_policy = AccessPolicy.from_settings(app_settings)

    # ── Middlewares (last added runs first) ─────────────────────────────────
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(AccessGateMiddleware, policy=app.state.access_policy)
    app.add_middleware(RequestIDMiddleware)

    # ── Exception handlers ──────────────────────────────────────────────────
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)

    # ── Routers ─────────────────────────────────────────────────────────────
    from app.api.routers import router as api_router

    app.include_router(api_router, prefix="/api")

    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict[str, bool]:
        """Liveness check: `{"ok": true}` when the process is responsive."""
        return {"ok": True}

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn/Gunicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
__all__ = ["create_app", "app"]


# Local dev runner (prefer: `uvicorn app.main:app --reload`)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
