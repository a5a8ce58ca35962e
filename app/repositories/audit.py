from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.audit_log import AuditLog

AuditRow = Dict[str, Any]


class AuditStoreProtocol:
    """Append-only audit trail.

    `insert` writes exactly one row and raises on failure; the recorder in
    `app.services.audit_log_service` is responsible for swallowing errors.
    """

    async def insert(self, row: AuditRow) -> None:
        raise NotImplementedError

    async def list(
        self,
        *,
        tenant_id: str,
        page: int,
        page_size: int,
        action: Optional[str] = None,
        q: Optional[str] = None,
    ) -> Tuple[List[AuditRow], int]:
        raise NotImplementedError


def _matches(entry: "_AuditEntry", action: Optional[str], q: Optional[str]) -> bool:
    if action and entry.action != action:
        return False
    if q:
        needle = q.lower()
        haystacks = (entry.action or "", entry.target_type or "")
        return any(needle in h.lower() for h in haystacks)
    return True


@dataclass
class _AuditEntry:
    tenant_id: str
    actor_user_id: str
    action: str
    target_type: Optional[str]
    target_id: Optional[str]
    metadata: Dict[str, Any]
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_row(self) -> AuditRow:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "actor_user_id": self.actor_user_id,
            "action": self.action,
            "target_type": self.target_type,
            "target_id": self.target_id,
            "metadata": dict(self.metadata),
            "created_at": self.created_at,
        }


class MemoryAuditStore(AuditStoreProtocol):
    """In-process store for development and tests; keeps the newest `max_entries`."""

    def __init__(self, max_entries: int = 10000) -> None:
        self._entries: List[_AuditEntry] = []
        self._max = max_entries
        self._lock = threading.Lock()

    async def insert(self, row: AuditRow) -> None:
        entry = _AuditEntry(
            tenant_id=row["tenant_id"],
            actor_user_id=row["actor_user_id"],
            action=row["action"],
            target_type=row.get("target_type"),
            target_id=row.get("target_id"),
            metadata=dict(row.get("metadata") or {}),
        )
        with self._lock:
            self._entries.append(entry)
            if len(self._entries) > self._max:
                self._entries = self._entries[-self._max :]

    async def list(
        self,
        *,
        tenant_id: str,
        page: int,
        page_size: int,
        action: Optional[str] = None,
        q: Optional[str] = None,
    ) -> Tuple[List[AuditRow], int]:
        with self._lock:
            entries = list(self._entries)
        items = [
            e.as_row()
            for e in reversed(entries)
            if e.tenant_id == tenant_id and _matches(e, action, q)
        ]
        total = len(items)
        start = (page - 1) * page_size
        return items[start : start + page_size], total

    def rows(self) -> List[AuditRow]:
        """Every stored row, oldest first."""
        with self._lock:
            return [e.as_row() for e in self._entries]


class SqlAlchemyAuditStore(AuditStoreProtocol):
    """`audit_logs` table through an async SQLAlchemy session factory."""

    def __init__(self, session_factory: Optional[Callable[[], AsyncSession]] = None) -> None:
        if session_factory is None:
            from app.db.session import get_async_session_maker

            session_factory = get_async_session_maker()
        self._session_factory = session_factory

    async def insert(self, row: AuditRow) -> None:
        async with self._session_factory() as session:
            session.add(
                AuditLog(
                    tenant_id=row["tenant_id"],
                    actor_user_id=row["actor_user_id"],
                    action=row["action"],
                    target_type=row.get("target_type"),
                    target_id=row.get("target_id"),
                    metadata_json=row.get("metadata") or {},
                )
            )
            try:
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def list(
        self,
        *,
        tenant_id: str,
        page: int,
        page_size: int,
        action: Optional[str] = None,
        q: Optional[str] = None,
    ) -> Tuple[List[AuditRow], int]:
        conditions = [AuditLog.tenant_id == tenant_id]
        if action:
            conditions.append(AuditLog.action == action)
        if q:
            pattern = f"%{q}%"
            conditions.append(or_(AuditLog.action.ilike(pattern), AuditLog.target_type.ilike(pattern)))

        async with self._session_factory() as session:
            total = await session.scalar(select(func.count()).select_from(AuditLog).where(*conditions))
            result = await session.scalars(
                select(AuditLog)
                .where(*conditions)
                .order_by(AuditLog.created_at.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            return [log.to_dict() for log in result.all()], int(total or 0)


def _import_string(path: str):
    module_path, _, class_name = path.partition(":")
    if not module_path or not class_name:
        raise ValueError("AUDIT_STORE_IMPL must be 'module.sub:ClassName'")
    module = __import__(module_path, fromlist=[class_name])
    return getattr(module, class_name)


_store: Optional[AuditStoreProtocol] = None
_store_lock = threading.Lock()


def get_audit_store() -> AuditStoreProtocol:
    """Process-wide audit store, chosen once from settings.

    `AUDIT_STORE_IMPL` (import string) wins over `AUDIT_STORE`.
    """
    global _store
    with _store_lock:
        if _store is None:
            from app.core.config import settings

            if settings.AUDIT_STORE_IMPL:
                _store = _import_string(settings.AUDIT_STORE_IMPL)()
            elif settings.AUDIT_STORE == "database":
                _store = SqlAlchemyAuditStore()
            else:
                _store = MemoryAuditStore()
        return _store


def set_audit_store(store: Optional[AuditStoreProtocol]) -> None:
    """Replace (or reset with None) the process-wide store."""
    global _store
    with _store_lock:
        _store = store


__all__ = [
    "AuditRow",
    "AuditStoreProtocol",
    "MemoryAuditStore",
    "SqlAlchemyAuditStore",
    "get_audit_store",
    "set_audit_store",
]
