"""
🏢 Oniix Admin • Tenant routes
==============================

- GET /tenant/audit-logs → paginated audit journal of the caller's tenant

Security
--------
- Owner/admin membership required (`require_tenant_admin`).
- Responses are `no-store`; the journal is tenant-private.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from loguru import logger

from app.api.http_utils import json_no_store, parse_int
from app.core.exceptions import AppException
from app.dependencies.auth import AuthContext, require_tenant_admin
from app.repositories.audit import AuditStoreProtocol, get_audit_store
from app.schemas.audit import AuditLogOut, AuditLogPage

router = APIRouter(prefix="/tenant", tags=["Tenant"])

DEFAULT_PAGE_SIZE = 20
MIN_PAGE_SIZE = 5
MAX_PAGE_SIZE = 50


def _clean_search(q: Optional[str]) -> str:
    """Trim and drop LIKE wildcards so user input only matches literally."""
    return (q or "").strip().replace("%", "").replace("_", "")


@router.get("/audit-logs")
async def list_audit_logs(
    page: Optional[str] = Query(None),
    page_size: Optional[str] = Query(None, alias="pageSize"),
    q: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    ctx: AuthContext = Depends(require_tenant_admin),
    store: AuditStoreProtocol = Depends(get_audit_store),
) -> JSONResponse:
    page_no = max(1, parse_int(page, 1))
    size = min(MAX_PAGE_SIZE, max(MIN_PAGE_SIZE, parse_int(page_size, DEFAULT_PAGE_SIZE)))

    try:
        rows, total = await store.list(
            tenant_id=ctx.tenant_id,
            page=page_no,
            page_size=size,
            action=(action or "").strip() or None,
            q=_clean_search(q) or None,
        )
    except Exception as e:
        logger.bind(tenant_id=ctx.tenant_id, error=str(e)).error("Audit logs load error")
        raise AppException(status_code=400, message="Impossible de charger le journal.")

    body = AuditLogPage(
        logs=[AuditLogOut.model_validate(r) for r in rows],
        page=page_no,
        page_size=size,
        total=total,
    )
    return json_no_store(body)
