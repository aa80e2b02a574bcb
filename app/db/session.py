from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {}
    # pool_pre_ping: check connection is alive before use (avoids "connection is closed" errors
    # when DB or network closed idle connections).
    # pool_recycle: discard connections after this many seconds to avoid stale connections.
    return {"pool_pre_ping": True, "pool_recycle": 300}


engine = create_async_engine(
    settings.database_url,
    echo=False,
    future=True,
    **_engine_options(settings.database_url),
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


def enable_sqlite_foreign_keys(async_engine) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if settings.database_url.startswith("sqlite"):
    enable_sqlite_foreign_keys(engine)
