"""Project model (owned by the project-management flows; read-only here)."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Project(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "projects"

    user_id: str = Field(nullable=False, index=True)
    name: str = Field(nullable=False)
    slug: str = Field(nullable=False)
    description: Optional[str] = None
    status: str = Field(default="active", nullable=False)  # active | archived | idea
    type: str = Field(default="general", nullable=False)  # coding | general
