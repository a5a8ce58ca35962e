from __future__ import annotations

"""
Oniix Admin — Database Engine & Session Factory

- Async engine/session only (the audit store is the sole database client).
- Created lazily on first use, so importing this module never needs a
  database driver or a configured `DATABASE_URL`.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings

# Pool knobs
_POOL_PRE_PING = True
_POOL_RECYCLE = 1800
_POOL_TIMEOUT = 30
_POOL_SIZE = 5
_MAX_OVERFLOW = 10

_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def get_async_engine() -> AsyncEngine:
    """Create the async engine on first use (requires `DATABASE_URL`)."""
    global _engine
    if _engine is None:
        url = settings.ASYNC_DATABASE_URL
        if not url:
            raise RuntimeError("DATABASE_URL is not configured")
        _engine = create_async_engine(
            url,
            pool_pre_ping=_POOL_PRE_PING,
            pool_recycle=_POOL_RECYCLE,
            pool_size=_POOL_SIZE,
            max_overflow=_MAX_OVERFLOW,
            pool_timeout=_POOL_TIMEOUT,
            echo=False,
        )
    return _engine


def get_async_session_maker() -> async_sessionmaker[AsyncSession]:
    """Create the async session factory on first use."""
    global _session_maker
    if _session_maker is None:
        _session_maker = async_sessionmaker(
            bind=get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_maker


async def dispose_engine() -> None:
    """Dispose the engine if one was created (app shutdown)."""
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _session_maker = None


__all__ = [
    "get_async_engine",
    "get_async_session_maker",
    "dispose_engine",
]
