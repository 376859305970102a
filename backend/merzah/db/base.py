"""SQLAlchemy Declarative Base and shared column types.

Invariants:
    - All models inherit from Base
    - UTCDateTime always stores UTC and always returns aware UTC datetimes

Design Decisions:
    - UTCDateTime normalizes on bind because SQLite drops tzinfo while PostgreSQL
      timestamptz keeps only the instant; either way comparisons stay in UTC
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


class Base(DeclarativeBase):
    """Base class for all Merzah ORM models."""
    pass


class UTCDateTime(TypeDecorator):
    """Aware datetime column stored as UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("UTCDateTime requires timezone-aware datetimes")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
