"""Core database access helpers.

Re-exports the engine, session factory and `get_db` dependency from
`app.core.database.session`, the shared declarative `Base`, and the
record-store adapter used by the domain repositories.
"""

from app.models.base import Base

from .session import SessionLocal, build_engine, engine, get_db
from .record_store import (
    RecordConflictError,
    RecordNotFoundError,
    RecordStore,
    RecordStoreError,
)

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "build_engine",
    "RecordStore",
    "RecordStoreError",
    "RecordConflictError",
    "RecordNotFoundError",
]
