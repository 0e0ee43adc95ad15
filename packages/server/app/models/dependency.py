"""Task dependency edge: ``blocking_task_id`` must finish before ``blocked_task_id``."""

import uuid

from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlmodel import Field, SQLModel

from focusdesk_shared.schemas.common import DependencyType

from .base import CreatedAtMixin, UUIDMixin


class TaskDependency(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "task_dependencies"
    __table_args__ = (
        CheckConstraint("blocking_task_id != blocked_task_id", name="no_self_dependency"),
        UniqueConstraint("blocking_task_id", "blocked_task_id", name="uq_dependency_pair"),
    )

    user_id: str = Field(nullable=False, index=True)
    blocking_task_id: uuid.UUID = Field(foreign_key="tasks.id", nullable=False, index=True)
    blocked_task_id: uuid.UUID = Field(foreign_key="tasks.id", nullable=False, index=True)
    dependency_type: str = Field(nullable=False, default=DependencyType.FINISH_TO_START.value)
