"""Dependency-graph schemas for shared use across server and frontend codegen."""

from __future__ import annotations

from typing import List
from uuid import UUID

from pydantic import BaseModel, Field

from .tasks import TaskRead


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

class DependencyCreate(BaseModel):
    """Request body for POST /dependencies.

    ``blocking_task_id`` must finish before ``blocked_task_id`` is unblocked.
    """
    blocked_task_id: UUID
    blocking_task_id: UUID


class DependencyCreated(BaseModel):
    id: UUID


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class DependencyLink(BaseModel):
    """A neighbouring task paired with the edge that connects it."""
    dependency_id: UUID
    task: TaskRead


class DependencyBatchRequest(BaseModel):
    """Request body for POST /dependencies/batch."""
    task_ids: List[UUID] = Field(default_factory=list)


class TaskDependencySummary(BaseModel):
    blocker_ids: List[UUID] = Field(default_factory=list)
    blocking_ids: List[UUID] = Field(default_factory=list)
