"""Async SQLAlchemy engine and session helpers."""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from ..core.config import AppSettings

# ``Base`` is the parent class for every SQLAlchemy model defined in stockroom/models.
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: AppSettings) -> AsyncEngine:
    """Create the process-wide engine; its pool is shared by every request."""

    url = make_url(settings.DB_URL)
    kwargs: dict[str, object] = {"echo": settings.DB_ECHO}
    if url.get_backend_name() == "sqlite":
        # In-memory SQLite runs on a single static connection which takes no pool sizing.
        if url.database not in (None, "", ":memory:"):
            kwargs["pool_size"] = settings.DB_POOL_SIZE
            kwargs["max_overflow"] = 0
    else:
        kwargs["pool_size"] = settings.DB_POOL_SIZE
        kwargs["max_overflow"] = 0
        kwargs["pool_pre_ping"] = True
    engine = create_async_engine(settings.DB_URL, **kwargs)
    if url.get_backend_name() == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    # ``expire_on_commit=False`` keeps loaded rows readable after the session closes.
    return async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create any missing tables. Existing tables are left untouched."""

    # Importing the models registers them with ``Base.metadata``.
    from ..models import account, product, rental  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
