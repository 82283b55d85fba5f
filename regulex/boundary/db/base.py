"""
Declarative base and shared columns for the rule store tables.

Documents, chunks, rules and chunk stats all register on `Base.metadata`,
which `init_database` uses to create the schema.

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Registry for the rule store ORM models."""


class TimestampMixin:
    """
    Row bookkeeping columns.

    Attributes:
        created_at: Insert time (UTC)
        updated_at: Time of the last UPDATE through the ORM or a Core
                    statement that goes through `onupdate` (UTC)
    """

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
