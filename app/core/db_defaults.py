"""Database-aware helpers for column types and defaults."""

from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB
from sqlalchemy.sql import text


def timestamp_default():
    """Return a server-side timestamp default portable across dialects."""
    return text("CURRENT_TIMESTAMP")


def utcnow() -> datetime:
    """Timezone-aware "now" used for application-side timestamps."""
    return datetime.now(timezone.utc)


def json_type():
    """
    Return a JSONB type that stores plain JSON on SQLite.
    """
    return PG_JSONB().with_variant(JSON, "sqlite")


__all__ = ["timestamp_default", "utcnow", "json_type"]
