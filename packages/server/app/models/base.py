"""Shared columns for the table models: UUID primary keys and UTC timestamps."""

from datetime import datetime, timezone
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp(**column_kwargs):
    return Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now(), **column_kwargs},
        sa_type=sa.DateTime(timezone=True),
    )


class UUIDMixin(SQLModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)


class CreatedAtMixin(SQLModel):
    """Rows that are written once, like dependency edges."""

    created_at: datetime = _timestamp()


class TimestampMixin(CreatedAtMixin):
    updated_at: datetime = _timestamp(onupdate=utcnow)
