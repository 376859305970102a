"""ORM Models - SQLAlchemy declarative models.

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from merzah.models.event import Event  # noqa: F401
