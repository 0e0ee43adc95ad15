# Importing the models registers their tables on SQLModel.metadata for Alembic and tests.
from .base import CreatedAtMixin, TimestampMixin, UUIDMixin  # noqa: F401
from .project import Project  # noqa: F401
from .task import Task  # noqa: F401
from .dependency import TaskDependency  # noqa: F401
