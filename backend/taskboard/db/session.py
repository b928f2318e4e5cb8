from __future__ import annotations

from collections.abc import AsyncGenerator

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskboard.core.config import settings
from taskboard.core.errors import BackendError

log = structlog.get_logger(__name__)

# -----------------------------
# Async engine (FastAPI)
# -----------------------------
# Use CLEAN URL to avoid asyncpg errors with sslmode/channel_binding query params.
DATABASE_URL_ASYNC = settings.DATABASE_URL_ASYNC_CLEAN

_engine_kwargs: dict = {"echo": False, "future": True}
if not DATABASE_URL_ASYNC.startswith("sqlite"):
    _engine_kwargs.update(
        pool_pre_ping=True,  # detects dead connections before using them
        pool_recycle=300,    # recycle connections periodically (seconds)
    )

engine: AsyncEngine = create_async_engine(DATABASE_URL_ASYNC, **_engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides one AsyncSession per request.
    Always closes the session after the request completes.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def commit_or_raise(db: AsyncSession, *, action: str) -> None:
    """
    Commit a primary mutation. Store failures roll the whole unit back and
    surface as BackendError so no partial write is left behind.
    """
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        log.error("commit_failed", action=action, error=str(e))
        raise BackendError(f"Failed to {action}. Please try again.") from e


async def create_sqlite_schema() -> None:
    """
    SQLite dev databases are created in place; Postgres goes through alembic.
    """
    if engine.url.get_backend_name() != "sqlite":
        return

    from taskboard.db.base import Base
    import taskboard.models  # noqa: F401  # force model registration

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
