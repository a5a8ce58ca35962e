# app/services/audit_log_service.py
from __future__ import annotations

"""
Oniix Admin — Audit Log Service (async, best-effort)
====================================================

Purpose
-------
Append one tenant-scoped audit record per privileged action (invites, member
changes, settings updates, stream and channel edits).

Design notes
------------
- **Context required**: a record is written only when both `tenant_id` and
  `actor_user_id` are present. Otherwise the write is skipped with a warning;
  some actions legitimately run outside a tenant (system bootstrap).
- **At most once**: a single insert, no retry, no timeout of its own.
- **Never raises**: store failures are logged as one error entry and the
  caller's primary operation carries on.
- `metadata` is scrubbed of obvious secret keys and coerced to a
  JSON-serializable mapping; the store assigns `id` and `created_at`.

Usage
-----
    await record_audit_event(
        store,
        tenant_id=ctx.tenant_id,
        actor_user_id=ctx.user_id,
        action=AuditAction.INVITE_CREATE,
        target_type="invite",
        target_id=str(invite_id),
        metadata={"email": email},
    )
"""

from enum import Enum
import json
from typing import Any, Dict, Mapping, Optional, Union

from loguru import logger

from app.repositories.audit import AuditStoreProtocol


# ─────────────────────────────────────────────────────────────
# 📋 Enum: action codes used by the admin dashboard
# ─────────────────────────────────────────────────────────────
class AuditAction(str, Enum):
    # 👥 Tenant membership
    INVITE_CREATE = "invite.create"
    INVITE_RESEND = "invite.resend"
    INVITE_REVOKE = "invite.revoke"
    INVITE_ACCEPT = "invite.accept"
    MEMBER_ROLE_UPDATE = "member.role_update"
    MEMBER_REMOVE = "member.remove"

    # ⚙️ Settings
    TENANT_SETTINGS_UPDATE = "settings.tenant_update"
    USER_SETTINGS_UPDATE = "settings.user_update"
    PASSWORD_CHANGE = "settings.password_change"

    # 📺 Catalog & live
    CHANNEL_CREATE = "channel.create"
    CHANNEL_UPDATE = "channel.update"
    CHANNEL_DELETE = "channel.delete"
    STREAM_CREATE = "stream.create"
    STREAM_UPDATE = "stream.update"
    STREAM_END = "stream.end"
    STREAM_DELETE = "stream.delete"

    # 👤 Users
    USER_CREATE = "user.create"
    USER_UPDATE = "user.update"
    USER_DELETE = "user.delete"

    def __str__(self) -> str:
        return self.value


# ─────────────────────────────────────────────────────────────
# 🔎 Helpers: metadata scrubbing
# ─────────────────────────────────────────────────────────────
_SENSITIVE_KEYS = {
    "authorization",
    "token",
    "access_token",
    "refresh_token",
    "password",
    "secret",
    "cookie",
    "set-cookie",
}


def _scrub(obj: Any) -> Any:
    """Recursively drop obvious secret keys from dicts/lists."""
    if isinstance(obj, Mapping):
        return {k: _scrub(v) for k, v in obj.items() if str(k).lower() not in _SENSITIVE_KEYS}
    if isinstance(obj, (list, tuple)):
        return [_scrub(v) for v in obj]
    return obj


def _safe_metadata(metadata: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if not metadata:
        return {}
    if not isinstance(metadata, Mapping):
        return {"raw": str(metadata)}
    clean = _scrub(metadata)
    try:
        json.dumps(clean)
        return clean
    except (TypeError, ValueError):
        return {"raw": "non-serializable metadata"}


# ─────────────────────────────────────────────────────────────
# 🧠 Audit Writer (best-effort, never raises)
# ─────────────────────────────────────────────────────────────
async def record_audit_event(
    store: AuditStoreProtocol,
    *,
    tenant_id: Optional[str],
    actor_user_id: Optional[str],
    action: Union[str, AuditAction],
    target_type: Optional[str] = None,
    target_id: Optional[str] = None,
    metadata: Optional[Mapping[str, Any]] = None,
) -> None:
    """Append one audit record for `action`.

    Skips (warning) when `tenant_id` or `actor_user_id` is missing. Any store
    failure is caught and logged as an error with the failure message; the
    function always returns None.
    """
    action = str(action)
    log = logger.bind(action=action, tenant_id=tenant_id, actor_user_id=actor_user_id)

    if not tenant_id or not actor_user_id:
        log.warning("Audit log skipped (missing context)")
        return None

    try:
        row = {
            "tenant_id": tenant_id,
            "actor_user_id": actor_user_id,
            "action": action,
            "target_type": target_type or None,
            "target_id": target_id or None,
            "metadata": _safe_metadata(metadata),
        }
        await store.insert(row)
    except Exception as e:
        log.bind(error=str(e)).error("Audit log insert failed")
    return None


__all__ = [
    "AuditAction",
    "record_audit_event",
]
