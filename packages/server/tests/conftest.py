"""
Shared fixtures: an in-memory SQLite database per test, a data factory, and an
HTTP client wired to the same database.
"""

import os

# Settings are cached on first import; point the app at SQLite before that happens.
os.environ.setdefault("FD_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("FD_SECRET_KEY", "test-secret")
os.environ.setdefault("FD_LOG_FORMAT", "console")

import uuid
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401
from app.core.auth import create_access_token
from app.core.database import get_session
from app.main import app
from app.models.project import Project
from app.models.task import Task

USER_A = "user_alpha"
USER_B = "user_beta"


class Factory:
    """Inserts projects and tasks directly; the dependency service never writes them."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def project(self, user_id: str = USER_A, name: str = "Project") -> Project:
        project = Project(
            user_id=user_id,
            name=name,
            slug=name.lower().replace(" ", "-"),
        )
        self.session.add(project)
        await self.session.commit()
        return project

    async def task(
        self,
        project: Project,
        title: str = "Task",
        user_id: Optional[str] = None,
    ) -> Task:
        task = Task(
            user_id=user_id or project.user_id,
            project_id=project.id,
            title=title,
        )
        self.session.add(task)
        await self.session.commit()
        return task

    async def tasks(self, project: Project, *titles: str) -> list[Task]:
        return [await self.task(project, title) for title in titles]


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def factory(session):
    return Factory(session)


@pytest.fixture
async def client(session_factory):
    async def _session_override():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = _session_override
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user_id: str = USER_A) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def headers_a() -> dict[str, str]:
    return auth_headers(USER_A)


@pytest.fixture
def headers_b() -> dict[str, str]:
    return auth_headers(USER_B)


@pytest.fixture
def missing_id() -> uuid.UUID:
    return uuid.uuid4()
