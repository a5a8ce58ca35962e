# tests/test_config.py

from app.core.access_gate import AccessPolicy
from app.core.config import DEFAULT_BLOCKED_PATH_PREFIXES, DEFAULT_PUBLIC_PATH_PREFIXES, Settings


def test_defaults():
    s = Settings()
    assert s.BLOCKED_PATH_PREFIXES == DEFAULT_BLOCKED_PATH_PREFIXES
    assert s.PUBLIC_PATH_PREFIXES == DEFAULT_PUBLIC_PATH_PREFIXES
    assert s.ACCESS_TOKEN_COOKIE_NAME == "oniix-access-token"
    assert s.LOGIN_PATH == "/login"
    assert s.STATIC_DOT_HEURISTIC is True
    assert s.AUDIT_STORE == "memory"


def test_prefix_lists_accept_csv_from_env(monkeypatch):
    monkeypatch.setenv("BLOCKED_PATH_PREFIXES", " /api/upload, ,/api/ads ")
    monkeypatch.setenv("PUBLIC_PATH_PREFIXES", "/_next,/healthz")
    monkeypatch.setenv("STATIC_DOT_HEURISTIC", "false")

    s = Settings()
    assert s.BLOCKED_PATH_PREFIXES == ["/api/upload", "/api/ads"]
    assert s.PUBLIC_PATH_PREFIXES == ["/_next", "/healthz"]

    policy = AccessPolicy.from_settings(s)
    assert policy.blocked_prefixes == ("/api/upload", "/api/ads")
    assert policy.static_dot_heuristic is False


def test_supabase_url_is_normalized():
    assert Settings(SUPABASE_URL="project.supabase.co/").SUPABASE_URL == "https://project.supabase.co"
    assert Settings(SUPABASE_URL="  ").SUPABASE_URL is None


def test_async_database_url_upgrades_driver():
    assert Settings(DATABASE_URL="postgresql://u:p@db/oniix").ASYNC_DATABASE_URL == "postgresql+asyncpg://u:p@db/oniix"
    assert Settings(DATABASE_URL="postgres://u:p@db/oniix").ASYNC_DATABASE_URL == "postgresql+asyncpg://u:p@db/oniix"
    assert Settings().ASYNC_DATABASE_URL == ""


def test_production_flag():
    assert Settings(ENV="production").is_production
    assert not Settings(ENV="staging").is_production
