# app/core/config.py
from __future__ import annotations

"""
# Oniix Admin — Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; nothing required to boot the gate.
- CSV → list helpers so prefix lists can be set from plain env vars.
- Optional external systems (Supabase auth, Postgres) so imports never crash in dev.

## Usage
    from app.core.config import settings
"""

from typing import Annotated, List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

load_dotenv()  # harmless in prod; convenient in dev


DEFAULT_BLOCKED_PATH_PREFIXES = [
    "/api/public",
    "/api/upload",
    "/api/utils/validate-hls",
    "/api/_debug",
]

DEFAULT_PUBLIC_PATH_PREFIXES = [
    "/api/auth/login",
    "/api/auth/signup",
    "/api/auth/logout",
    "/_next",
    "/static",
    "/favicon.ico",
    "/healthz",
]


# ─────────────────────────────────────────────────────────────
# Small helpers
# ─────────────────────────────────────────────────────────────
def _split_csv(v: str | None) -> list[str]:
    """Split a comma-separated string into a trimmed list (empty-safe)."""
    if not v:
        return []
    return [s.strip() for s in str(v).split(",") if s and s.strip()]


def _normalize_url_like(v: str | None) -> str:
    """Normalize to a string URL without trailing slash."""
    s = (v or "").strip()
    if not s:
        return ""
    if not (s.startswith("http://") or s.startswith("https://")):
        s = "https://" + s
    return s.rstrip("/")


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Access gate:
        - Prefix lists are read once at startup and frozen into an
          `AccessPolicy` (see `app.core.access_gate`).

    Audit:
        - `AUDIT_STORE=memory` keeps records in-process (dev/tests);
          `AUDIT_STORE=database` writes to the `audit_logs` table.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "Oniix Admin API"
    VERSION: str = "1.0.0"
    ENV: Literal["development", "staging", "production"] = "development"
    ENABLE_DOCS: bool = True

    # ── Session cookies ───────────────────────────────────────
    ACCESS_TOKEN_COOKIE_NAME: str = "oniix-access-token"
    REFRESH_TOKEN_COOKIE_NAME: str = "oniix-refresh-token"
    ACCESS_COOKIE_MAX_AGE: int = Field(60 * 60, ge=60)
    REFRESH_COOKIE_MAX_AGE: int = Field(60 * 60 * 24 * 30, ge=60)

    # ── Access gate ───────────────────────────────────────────
    LOGIN_PATH: str = "/login"
    HOME_PATH: str = "/"
    BLOCKED_PATH_PREFIXES: Annotated[List[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_BLOCKED_PATH_PREFIXES))
    PUBLIC_PATH_PREFIXES: Annotated[List[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_PUBLIC_PATH_PREFIXES))
    STATIC_DOT_HEURISTIC: bool = True
    BLOCKED_MESSAGE: str = "Service indisponible."

    # ── Supabase auth server ──────────────────────────────────
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    # Only used by signup to provision the new tenant; never sent to the browser
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    SUPABASE_TIMEOUT_SECONDS: float = Field(10.0, gt=0, le=120)

    # ── Audit store ───────────────────────────────────────────
    DATABASE_URL: Optional[str] = None
    AUDIT_STORE: Literal["memory", "database"] = "memory"
    AUDIT_STORE_IMPL: Optional[str] = None  # "module.sub:ClassName"

    # ── Validators / normalizers ──────────────────────────────
    @field_validator("BLOCKED_PATH_PREFIXES", "PUBLIC_PATH_PREFIXES", mode="before")
    @classmethod
    def _assemble_prefixes(cls, v: str | List[str]):
        if isinstance(v, str):
            return _split_csv(v)
        return v

    @field_validator("SUPABASE_URL", mode="before")
    @classmethod
    def _normalize_supabase_url(cls, v: str | None) -> str | None:
        return _normalize_url_like(v) or None

    # ── Derived / convenience properties ─────────────────────
    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def ASYNC_DATABASE_URL(self) -> str:
        """Async SQLAlchemy DSN (empty when no database is configured)."""
        url = (self.DATABASE_URL or "").strip()
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        return url


settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "DEFAULT_BLOCKED_PATH_PREFIXES",
    "DEFAULT_PUBLIC_PATH_PREFIXES",
]
