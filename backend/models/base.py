"""Base model utilities for SQLAlchemy."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.sql import func


def utcnow() -> datetime:
    """Timezone-aware current time used for client-side column defaults."""
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Mixin that adds created_at and updated_at fields to models."""

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        comment="When the record was created"
    )

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        comment="When the record was last updated"
    )


class UUIDMixin:
    """Mixin that adds UUID primary key."""

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        nullable=False,
        comment="Unique identifier"
    )
