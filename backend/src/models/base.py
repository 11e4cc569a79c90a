"""SQLAlchemy declarative bases with common mixins."""
from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy table models."""

    pass


class ViewBase(DeclarativeBase):
    """
    Base class for read-only models mapped onto database views.

    Kept on its own metadata so that ``Base.metadata.create_all()`` never tries to
    create (or Alembic autogenerate to drop) the materialized views as tables. The
    views themselves are created by ``db.views``.
    """

    pass


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at columns.

    All timestamps are timezone-aware (stored as TIMESTAMP WITH TIME ZONE in PostgreSQL).

    Uses clock_timestamp() instead of now() to get actual wall-clock time rather than
    transaction start time. An import runs as one long transaction, so now() would
    stamp every row of the batch with the same instant.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        onupdate=func.clock_timestamp(),
        nullable=False,
    )
