"""
Oniix Admin — ORM model registry
================================

Import models here so their tables are registered on `Base.metadata`.
"""

from app.db.base_class import Base
from .audit_log import AuditLog

__all__ = ["Base", "AuditLog"]
