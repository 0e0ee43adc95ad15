"""
Dependency service layer: the task dependency graph.

An edge ``blocking -> blocked`` means the blocking task must finish before the
blocked task is considered unblocked. Edges are per-owner and never span
projects. Handles:
- Edge creation with ordered validation and circular dependency detection
- Edge removal by endpoint pair or by id
- Neighbour lookups, batch hydration, and picker candidate queries
"""

from __future__ import annotations

import uuid
from collections import defaultdict, deque
from typing import Iterable, Mapping, Sequence

import structlog
from fastapi import HTTPException
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.dependency import TaskDependency
from app.services.tasks import get_owned_task, get_owned_tasks, list_project_tasks
from focusdesk_shared.schemas.common import DependencyType
from focusdesk_shared.schemas.dependencies import DependencyLink, TaskDependencySummary
from focusdesk_shared.schemas.tasks import TaskRead

log = structlog.get_logger()

BlockerMap = Mapping[uuid.UUID, Iterable[uuid.UUID]]


# ---------------------------------------------------------------------------
# Cycle detection
# ---------------------------------------------------------------------------


def would_create_cycle(
    blockers_of: BlockerMap,
    blocked_task_id: uuid.UUID,
    blocking_task_id: uuid.UUID,
) -> bool:
    """Return True if adding ``blocking_task_id -> blocked_task_id`` closes a loop.

    BFS from the proposed blocking task through "what blocks current". If the
    proposed blocked task is reached, it already (transitively) blocks the
    blocking task, so the new edge would make a cycle.

    ``blockers_of`` maps a task id to the ids of the tasks that directly block it.
    """
    visited: set[uuid.UUID] = set()
    queue = deque([blocking_task_id])
    while queue:
        current = queue.popleft()
        if current == blocked_task_id:
            return True
        if current in visited:
            continue
        visited.add(current)
        queue.extend(blockers_of.get(current, ()))
    return False


async def load_blocker_map(
    session: AsyncSession, user_id: str
) -> dict[uuid.UUID, list[uuid.UUID]]:
    """Build ``blocked -> [blocking, ...]`` from the owner's edges in one query."""
    result = await session.execute(
        select(TaskDependency.blocked_task_id, TaskDependency.blocking_task_id).where(
            TaskDependency.user_id == user_id
        )
    )
    blockers_of: dict[uuid.UUID, list[uuid.UUID]] = defaultdict(list)
    for blocked_id, blocking_id in result.all():
        blockers_of[blocked_id].append(blocking_id)
    return blockers_of


async def check_would_create_cycle(
    session: AsyncSession,
    user_id: str,
    blocked_task_id: uuid.UUID,
    blocking_task_id: uuid.UUID,
) -> bool:
    blockers_of = await load_blocker_map(session, user_id)
    return would_create_cycle(blockers_of, blocked_task_id, blocking_task_id)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _lock_owner_graph(session: AsyncSession, user_id: str) -> None:
    """Serialize graph writes for one owner until the transaction ends.

    PostgreSQL takes a per-owner advisory lock. SQLite has no such lock, and
    its driver only opens a transaction at the first write, so the database
    write lock is taken up front with ``BEGIN IMMEDIATE``.
    """
    dialect = session.bind.dialect.name if session.bind is not None else None
    if dialect == "postgresql":
        await session.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:owner))"),
            {"owner": user_id},
        )
    elif dialect == "sqlite":
        conn = await session.connection()
        raw = await conn.get_raw_connection()
        if not raw.driver_connection.in_transaction:
            await conn.exec_driver_sql("BEGIN IMMEDIATE")


async def _find_edge(
    session: AsyncSession,
    blocked_task_id: uuid.UUID,
    blocking_task_id: uuid.UUID,
) -> TaskDependency | None:
    result = await session.execute(
        select(TaskDependency).where(
            TaskDependency.blocked_task_id == blocked_task_id,
            TaskDependency.blocking_task_id == blocking_task_id,
        )
    )
    return result.scalars().first()


async def _delete_owned_edge(
    session: AsyncSession, dep: TaskDependency | None, user_id: str
) -> None:
    if not dep:
        raise HTTPException(status_code=404, detail="Dependency not found")
    if dep.user_id != user_id:
        raise HTTPException(status_code=403, detail="Unauthorized")
    await session.delete(dep)
    await session.flush()
    log.info(
        "dependency.removed",
        dependency_id=str(dep.id),
        blocking_task_id=str(dep.blocking_task_id),
        blocked_task_id=str(dep.blocked_task_id),
    )


async def _link_tasks(
    session: AsyncSession,
    deps: Sequence[TaskDependency],
    user_id: str,
    *,
    blockers: bool,
) -> list[DependencyLink]:
    """Pair each edge with the task on its far side, dropping dangling edges."""
    far_ids = [d.blocking_task_id if blockers else d.blocked_task_id for d in deps]
    tasks = await get_owned_tasks(session, far_ids, user_id)
    links = []
    for dep, far_id in zip(deps, far_ids):
        task = tasks.get(far_id)
        if task is None:
            continue
        links.append(DependencyLink(dependency_id=dep.id, task=TaskRead.model_validate(task)))
    return links


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def create_dependency(
    session: AsyncSession,
    blocked_task_id: uuid.UUID,
    blocking_task_id: uuid.UUID,
    user_id: str,
) -> TaskDependency:
    """Insert ``blocking_task_id -> blocked_task_id`` after validating every invariant."""
    if blocked_task_id == blocking_task_id:
        raise HTTPException(status_code=409, detail="A task cannot block itself")

    await _lock_owner_graph(session, user_id)

    blocked_task = await get_owned_task(session, blocked_task_id, user_id)
    if blocked_task is None:
        raise HTTPException(status_code=404, detail="Blocked task not found")
    blocking_task = await get_owned_task(session, blocking_task_id, user_id)
    if blocking_task is None:
        raise HTTPException(status_code=404, detail="Blocking task not found")

    if blocked_task.project_id != blocking_task.project_id:
        raise HTTPException(status_code=422, detail="Tasks must belong to the same project")

    if await _find_edge(session, blocked_task_id, blocking_task_id):
        raise HTTPException(status_code=409, detail="This dependency already exists")

    if await check_would_create_cycle(session, user_id, blocked_task_id, blocking_task_id):
        log.info(
            "dependency.rejected",
            reason="cycle",
            blocking_task_id=str(blocking_task_id),
            blocked_task_id=str(blocked_task_id),
        )
        raise HTTPException(
            status_code=409,
            detail="This dependency would create a circular reference",
        )

    dep = TaskDependency(
        user_id=user_id,
        blocking_task_id=blocking_task_id,
        blocked_task_id=blocked_task_id,
        dependency_type=DependencyType.FINISH_TO_START.value,
    )
    session.add(dep)
    try:
        await session.flush()
    except IntegrityError as exc:
        # Unique pair constraint; a concurrent writer inserted the same edge.
        raise HTTPException(status_code=409, detail="This dependency already exists") from exc

    log.info(
        "dependency.created",
        dependency_id=str(dep.id),
        blocking_task_id=str(blocking_task_id),
        blocked_task_id=str(blocked_task_id),
    )
    return dep


async def remove_dependency(
    session: AsyncSession,
    blocked_task_id: uuid.UUID,
    blocking_task_id: uuid.UUID,
    user_id: str,
) -> None:
    dep = await _find_edge(session, blocked_task_id, blocking_task_id)
    await _delete_owned_edge(session, dep, user_id)


async def remove_dependency_by_id(
    session: AsyncSession,
    dependency_id: uuid.UUID,
    user_id: str,
) -> None:
    dep = await session.get(TaskDependency, dependency_id)
    await _delete_owned_edge(session, dep, user_id)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_blockers_for_task(
    session: AsyncSession, task_id: uuid.UUID, user_id: str
) -> list[DependencyLink]:
    """Tasks that directly block ``task_id``."""
    result = await session.execute(
        select(TaskDependency)
        .where(
            TaskDependency.blocked_task_id == task_id,
            TaskDependency.user_id == user_id,
        )
        .order_by(TaskDependency.created_at)
    )
    return await _link_tasks(session, result.scalars().all(), user_id, blockers=True)


async def get_blocked_by_task(
    session: AsyncSession, task_id: uuid.UUID, user_id: str
) -> list[DependencyLink]:
    """Tasks that ``task_id`` directly blocks."""
    result = await session.execute(
        select(TaskDependency)
        .where(
            TaskDependency.blocking_task_id == task_id,
            TaskDependency.user_id == user_id,
        )
        .order_by(TaskDependency.created_at)
    )
    return await _link_tasks(session, result.scalars().all(), user_id, blockers=False)


async def get_dependencies_for_tasks_batch(
    session: AsyncSession, task_ids: Sequence[uuid.UUID], user_id: str
) -> dict[uuid.UUID, TaskDependencySummary]:
    """Direct blockers and dependents for many tasks, from a single edge query.

    Every requested id is present in the result, with empty lists when it has
    no edges.
    """
    if not task_ids:
        return {}

    summaries = {tid: TaskDependencySummary() for tid in task_ids}

    result = await session.execute(
        select(TaskDependency)
        .where(TaskDependency.user_id == user_id)
        .order_by(TaskDependency.created_at)
    )
    for dep in result.scalars().all():
        blocked = summaries.get(dep.blocked_task_id)
        if blocked is not None:
            blocked.blocker_ids.append(dep.blocking_task_id)
        blocking = summaries.get(dep.blocking_task_id)
        if blocking is not None:
            blocking.blocking_ids.append(dep.blocked_task_id)
    return summaries


async def get_available_blockers(
    session: AsyncSession, task_id: uuid.UUID, user_id: str
) -> list[TaskRead]:
    """Tasks that may become a blocker of ``task_id`` without breaking an invariant."""
    task = await get_owned_task(session, task_id, user_id)
    if task is None:
        return []

    project_tasks = await list_project_tasks(session, task.project_id, user_id)
    blockers_of = await load_blocker_map(session, user_id)
    existing = set(blockers_of.get(task_id, ()))

    return [
        TaskRead.model_validate(candidate)
        for candidate in project_tasks
        if candidate.id != task_id
        and candidate.id not in existing
        and not would_create_cycle(blockers_of, task_id, candidate.id)
    ]


async def get_available_blocked(
    session: AsyncSession, task_id: uuid.UUID, user_id: str
) -> list[TaskRead]:
    """Tasks that ``task_id`` may start blocking without breaking an invariant."""
    task = await get_owned_task(session, task_id, user_id)
    if task is None:
        return []

    project_tasks = await list_project_tasks(session, task.project_id, user_id)
    blockers_of = await load_blocker_map(session, user_id)
    existing = {blocked for blocked, blockers in blockers_of.items() if task_id in blockers}

    return [
        TaskRead.model_validate(candidate)
        for candidate in project_tasks
        if candidate.id != task_id
        and candidate.id not in existing
        and not would_create_cycle(blockers_of, candidate.id, task_id)
    ]
