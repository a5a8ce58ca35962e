# tests/conftest.py

import os

# Test environment must be set before any app import reads settings.
os.environ.setdefault("ENV", "development")
os.environ.setdefault("AUDIT_STORE", "memory")
os.environ.setdefault("LOG_TO_FILE", "0")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.pop("AUDIT_STORE_IMPL", None)

from typing import List

import pytest
from httpx import ASGITransport, AsyncClient
from loguru import logger

from app.core.config import Settings
from app.core.logger import configure_logging
from app.dependencies.auth import get_supabase_auth
from app.main import create_app
from app.repositories.audit import MemoryAuditStore, set_audit_store
from app.services.supabase_auth import SupabaseAuthClient
from tests.fixtures.supabase import FakeSupabase

# Sinks are installed once here so later create_app() calls don't remove
# the per-test capture sink.
configure_logging()


@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"


# ─────────────────────────────────────────────────────────────
# 🪵 Log capture
# ─────────────────────────────────────────────────────────────
@pytest.fixture()
def log_records() -> List[dict]:
    """Loguru records emitted during the test (level, message, extra)."""
    records: List[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG", format="{message}")
    yield records
    logger.remove(handler_id)


# ─────────────────────────────────────────────────────────────
# 🧾 Audit store
# ─────────────────────────────────────────────────────────────
@pytest.fixture()
def memory_store() -> MemoryAuditStore:
    store = MemoryAuditStore()
    set_audit_store(store)
    yield store
    set_audit_store(None)


# ─────────────────────────────────────────────────────────────
# 🌐 App + client
# ─────────────────────────────────────────────────────────────
@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        SUPABASE_URL="https://project.supabase.test",
        SUPABASE_ANON_KEY="anon-key-for-tests",
        AUDIT_STORE="memory",
    )


@pytest.fixture()
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture()
def app(test_settings, fake_supabase, memory_store):
    application = create_app(test_settings)
    application.dependency_overrides[get_supabase_auth] = lambda: SupabaseAuthClient.from_settings(
        test_settings, transport=fake_supabase.transport()
    )
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
