"""Task read schema shared by the server and API clients."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from .common import TaskPriority, TaskStatus


class TaskRead(BaseModel):
    id: UUID
    user_id: str
    project_id: UUID
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority_level: TaskPriority
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
