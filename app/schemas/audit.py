# app/schemas/audit.py
from __future__ import annotations

"""
Pydantic schemas for Audit Logs — Oniix Admin
=============================================

Outward-facing models for the tenant audit journal. The page envelope keeps
the dashboard's camelCase `pageSize` on the wire.

Notes
-----
- Pydantic v2 with `from_attributes=True` for ORM compatibility.
- `metadata` is a free-form JSON object (already scrubbed by the service).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AuditLogOut(BaseModel):
    """Single audit record as listed in the tenant journal."""

    model_config = ConfigDict(from_attributes=True)

    id: Union[UUID, str] = Field(..., description="Audit log ID")
    actor_user_id: Union[UUID, str] = Field(..., description="User who performed the action")
    action: str = Field(..., min_length=1, description="Action code (e.g., invite.create)")
    target_type: Optional[str] = Field(None, description="Kind of object acted on")
    target_id: Optional[str] = Field(None, description="ID of the object acted on")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Scrubbed context for the event")
    created_at: datetime = Field(..., description="UTC time the record was stored")


class AuditLogPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    logs: List[AuditLogOut]
    page: int
    page_size: int = Field(..., alias="pageSize")
    total: int


__all__ = ["AuditLogOut", "AuditLogPage"]
