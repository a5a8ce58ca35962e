from __future__ import annotations

"""
🧾 Oniix Admin — Audit Logs (tenant-scoped)
===========================================

Append-only record of privileged actions performed in the admin dashboard.

Design highlights
-----------------
• **Immutable event record** keyed by UUID; `created_at` is **UTC & DB-driven**.
• Scoped to one tenant; the actor is the authenticated admin user.
• Avoid the reserved `metadata` attribute in SQLAlchemy by exposing it as
  `metadata_json` while keeping the DB column name `metadata`.
• JSON on every dialect, JSONB on PostgreSQL.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy import JSON, DateTime, Index, String, Uuid, func, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base

_JSON = JSON().with_variant(JSONB(), "postgresql")


class AuditLog(Base):
    """One privileged action performed by `actor_user_id` inside `tenant_id`.

    Common queries
    --------------
    • Tenant journal, newest first: composite DESC index provided.
    • Drill-down by action within a tenant.
    """

    __tablename__ = "audit_logs"

    # Supabase ids are uuid columns; kept as strings on the Python side
    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid4()))

    tenant_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False, index=True)
    actor_user_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    action: Mapped[str] = mapped_column(String(128), nullable=False, doc="Action code (e.g., invite.create)")
    target_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    target_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    metadata_json: Mapped[Dict[str, Any]] = mapped_column(
        "metadata", _JSON, nullable=False, default=dict, server_default=text("'{}'")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        Index("ix_audit_logs_tenant_ts_desc", "tenant_id", text("created_at DESC")),
        Index("ix_audit_logs_tenant_action_ts_desc", "tenant_id", "action", text("created_at DESC")),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "actor_user_id": str(self.actor_user_id),
            "action": self.action,
            "target_type": self.target_type,
            "target_id": self.target_id,
            "metadata": self.metadata_json or {},
            "created_at": self.created_at,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<AuditLog id={self.id} tenant_id={self.tenant_id} "
            f"action='{self.action}' created_at={self.created_at}>"
        )
