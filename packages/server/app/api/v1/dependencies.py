"""
Dependency endpoints: the task dependency graph.

- Queries (GET, and the batch POST) return empty results for anonymous callers.
- Mutations require an authenticated caller.
- Validation failures surface as ``{"detail": "<message>"}`` with a stable message.
"""

from __future__ import annotations

import uuid
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Identity, get_optional_identity, require_identity
from app.core.database import get_session
from app.services.dependencies import (
    create_dependency,
    get_available_blocked,
    get_available_blockers,
    get_blocked_by_task,
    get_blockers_for_task,
    get_dependencies_for_tasks_batch,
    remove_dependency,
    remove_dependency_by_id,
)
from focusdesk_shared.schemas.dependencies import (
    DependencyBatchRequest,
    DependencyCreate,
    DependencyCreated,
    DependencyLink,
    TaskDependencySummary,
)
from focusdesk_shared.schemas.tasks import TaskRead

router = APIRouter()


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


@router.get("/tasks/{task_id}/blockers", response_model=List[DependencyLink])
async def get_blockers_endpoint(
    task_id: uuid.UUID,
    identity: Optional[Identity] = Depends(get_optional_identity),
    session: AsyncSession = Depends(get_session),
):
    """Tasks that must finish before this one."""
    if identity is None:
        return []
    return await get_blockers_for_task(session, task_id, identity.user_id)


@router.get("/tasks/{task_id}/blocked", response_model=List[DependencyLink])
async def get_blocked_endpoint(
    task_id: uuid.UUID,
    identity: Optional[Identity] = Depends(get_optional_identity),
    session: AsyncSession = Depends(get_session),
):
    """Tasks waiting on this one."""
    if identity is None:
        return []
    return await get_blocked_by_task(session, task_id, identity.user_id)


@router.post("/batch", response_model=Dict[uuid.UUID, TaskDependencySummary])
async def get_dependencies_batch_endpoint(
    body: DependencyBatchRequest,
    identity: Optional[Identity] = Depends(get_optional_identity),
    session: AsyncSession = Depends(get_session),
):
    """Direct blocker / blocking ids for many tasks at once (board rendering)."""
    if identity is None:
        return {}
    return await get_dependencies_for_tasks_batch(session, body.task_ids, identity.user_id)


@router.get("/tasks/{task_id}/available-blockers", response_model=List[TaskRead])
async def get_available_blockers_endpoint(
    task_id: uuid.UUID,
    identity: Optional[Identity] = Depends(get_optional_identity),
    session: AsyncSession = Depends(get_session),
):
    """Candidates for "add a blocker" that creating would accept."""
    if identity is None:
        return []
    return await get_available_blockers(session, task_id, identity.user_id)


@router.get("/tasks/{task_id}/available-blocked", response_model=List[TaskRead])
async def get_available_blocked_endpoint(
    task_id: uuid.UUID,
    identity: Optional[Identity] = Depends(get_optional_identity),
    session: AsyncSession = Depends(get_session),
):
    """Candidates for "block another task" that creating would accept."""
    if identity is None:
        return []
    return await get_available_blocked(session, task_id, identity.user_id)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


@router.post("/", response_model=DependencyCreated, status_code=201)
async def create_dependency_endpoint(
    body: DependencyCreate,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
):
    """Add an edge (blocking task must finish before blocked task). Rejects cycles."""
    dep = await create_dependency(
        session, body.blocked_task_id, body.blocking_task_id, identity.user_id
    )
    await session.commit()
    return DependencyCreated(id=dep.id)


@router.delete("/tasks/{blocked_task_id}/blockers/{blocking_task_id}")
async def remove_dependency_endpoint(
    blocked_task_id: uuid.UUID,
    blocking_task_id: uuid.UUID,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
):
    """Remove the edge between two tasks."""
    await remove_dependency(session, blocked_task_id, blocking_task_id, identity.user_id)
    await session.commit()
    return {"ok": True}


@router.delete("/{dependency_id}")
async def remove_dependency_by_id_endpoint(
    dependency_id: uuid.UUID,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
):
    """Remove an edge by its id."""
    await remove_dependency_by_id(session, dependency_id, identity.user_id)
    await session.commit()
    return {"ok": True}
