from __future__ import annotations

"""
# Oniix Admin — SQLAlchemy Base

SQLAlchemy 2.0 declarative **Base** with global naming conventions. The
`audit_logs` table is owned by the platform database; this project maps it
but never creates or migrates it.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Global declarative base for Oniix Admin models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    def __repr__(self) -> str:  # pragma: no cover (repr convenience)
        return f"{self.__class__.__name__}(id={getattr(self, 'id', None)!r})"


__all__ = ["Base", "NAMING_CONVENTION"]
