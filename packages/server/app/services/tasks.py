"""
Task lookups used by the dependency graph.

Tasks are owned by the task-management flows; this module only reads them,
always scoped to the owning user.
"""

from __future__ import annotations

import uuid
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.task import Task


async def get_owned_task(
    session: AsyncSession, task_id: uuid.UUID, user_id: str
) -> Optional[Task]:
    """Return the task if it exists and belongs to ``user_id``."""
    task = await session.get(Task, task_id)
    if not task or task.user_id != user_id:
        return None
    return task


async def get_owned_tasks(
    session: AsyncSession, task_ids: Iterable[uuid.UUID], user_id: str
) -> dict[uuid.UUID, Task]:
    """Fetch several tasks in one query. Missing or foreign ids are absent from the result."""
    ids = set(task_ids)
    if not ids:
        return {}
    result = await session.execute(
        select(Task).where(Task.id.in_(list(ids)), Task.user_id == user_id)
    )
    return {t.id: t for t in result.scalars().all()}


async def list_project_tasks(
    session: AsyncSession, project_id: uuid.UUID, user_id: str
) -> list[Task]:
    result = await session.execute(
        select(Task)
        .where(Task.user_id == user_id, Task.project_id == project_id)
        .order_by(Task.created_at)
    )
    return list(result.scalars().all())
