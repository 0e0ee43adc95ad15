"""
Async engine and per-request sessions.

``FD_DATABASE_URL`` selects the backend: PostgreSQL (asyncpg) in deployments,
SQLite (aiosqlite) for local runs and tests.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.core.config import get_settings

settings = get_settings()


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    # A file or in-memory SQLite database has no server connection to go stale.
    is_sqlite = make_url(database_url).get_backend_name() == "sqlite"
    return create_async_engine(database_url, echo=echo, pool_pre_ping=not is_sqlite)


engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db() -> None:
    """Create missing tables. Local development only; deployments run Alembic."""
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request, committed when the endpoint returns.

    Any exception rolls the whole request back, so a rejected ``create``
    leaves nothing behind.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
