"""Database declarations - SQLAlchemy Base and shared column types.

Invariants:
    - Every ORM model inherits from db.base.Base
    - Timestamp columns use UTCDateTime (stored as UTC, returned aware)
"""
