# tests/test_auth/test_signup.py

import pytest

from tests.fixtures.supabase import session_cookie

URL = "/api/auth/signup"
CREDS = {"email": "owner@oniix.test", "password": "longpassword"}


@pytest.fixture()
def service_role(test_settings, fake_supabase):
    test_settings.SUPABASE_SERVICE_ROLE_KEY = "service-key"
    fake_supabase.service_role_key = "service-key"
    return "service-key"


def _cookie_names(r):
    return {c.split("=", 1)[0] for c in r.headers.get_list("set-cookie")}


def _paths(fake_supabase):
    return [(req.method, req.url.path) for req in fake_supabase.requests]


@pytest.mark.anyio
async def test_signup_logs_in_and_sets_both_cookies(client, fake_supabase):
    r = await client.post(URL, json=CREDS)

    assert r.status_code == 200
    assert r.json() == {"ok": True, "tenant_id": None}
    assert _cookie_names(r) == {"oniix-access-token", "oniix-refresh-token"}
    assert any(c.startswith("oniix-access-token=acc-user-1") for c in r.headers.get_list("set-cookie"))
    assert _paths(fake_supabase) == [("POST", "/auth/v1/signup"), ("POST", "/auth/v1/token")]
    # no service role configured: no tenant provisioning
    assert fake_supabase.tenants == []


@pytest.mark.anyio
async def test_signup_provisions_tenant_and_owner_membership(client, fake_supabase, service_role):
    r = await client.post(URL, json={**CREDS, "tenantName": "  Oniix Studio "})

    assert r.status_code == 200
    assert r.json() == {"ok": True, "tenant_id": "tenant-1"}
    assert fake_supabase.tenants == [{"id": "tenant-1", "name": "Oniix Studio", "created_by": "user-1"}]
    assert fake_supabase.memberships[("tenant-1", "user-1")] == "owner"
    assert fake_supabase.admin_updates["user-1"] == {"tenant_id": "tenant-1", "role": "tenant_admin"}

    admin_calls = [req for req in fake_supabase.requests if req.method == "PUT" or req.url.path.startswith("/rest/v1/")]
    assert len(admin_calls) == 3
    for req in admin_calls:
        assert req.headers["authorization"] == "Bearer service-key"
        assert req.headers["apikey"] == "service-key"


@pytest.mark.anyio
async def test_new_owner_can_read_the_tenant_journal(client, fake_supabase, service_role):
    await client.post(URL, json=CREDS)

    r = await client.get("/api/tenant/audit-logs", headers=session_cookie("acc-user-1"))

    assert r.status_code == 200
    assert r.json()["total"] == 0


@pytest.mark.anyio
async def test_blank_tenant_name_gets_default(client, fake_supabase, service_role):
    await client.post(URL, json={**CREDS, "tenantName": "   "})
    assert fake_supabase.tenants[0]["name"] == "Mon tenant"


@pytest.mark.anyio
async def test_missing_tenants_table_still_signs_in(client, fake_supabase, service_role):
    fake_supabase.missing_tables.add("tenants")

    r = await client.post(URL, json=CREDS)

    assert r.status_code == 200
    assert r.json() == {"ok": True, "tenant_id": None}
    assert _cookie_names(r) == {"oniix-access-token", "oniix-refresh-token"}
    assert fake_supabase.memberships == {}
    assert fake_supabase.admin_updates == {}


@pytest.mark.anyio
async def test_pending_email_confirmation_returns_message_without_session(client, fake_supabase):
    fake_supabase.confirm_email = True

    r = await client.post(URL, json=CREDS)

    assert r.status_code == 200
    assert r.json() == {"ok": True, "message": "Compte créé. Vérifie ton email pour confirmer."}
    assert r.headers.get_list("set-cookie") == []
    assert ("POST", "/auth/v1/token") not in _paths(fake_supabase)


@pytest.mark.anyio
@pytest.mark.parametrize("payload", [{}, {"email": "a@b.c"}, {"password": "longpassword"}])
async def test_signup_requires_email_and_password(client, fake_supabase, payload):
    r = await client.post(URL, json=payload)
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": "Email et mot de passe requis"}
    assert fake_supabase.requests == []


@pytest.mark.anyio
async def test_signup_rejects_short_password(client, fake_supabase):
    r = await client.post(URL, json={"email": "a@b.c", "password": "1234567"})
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": "Mot de passe trop court (min 8 caractères)"}
    assert fake_supabase.requests == []


@pytest.mark.anyio
async def test_duplicate_email_returns_401_with_upstream_message(client, fake_supabase):
    fake_supabase.add_account("owner@oniix.test", "whatever1", access_token="a", refresh_token="r")

    r = await client.post(URL, json=CREDS)

    assert r.status_code == 401
    assert r.json() == {"ok": False, "error": "User already registered"}


@pytest.mark.anyio
async def test_signup_auth_server_down_returns_502(client, fake_supabase):
    fake_supabase.down = True
    r = await client.post(URL, json=CREDS)
    assert r.status_code == 502
