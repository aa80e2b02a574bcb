"""
Create all tables for the configured DATABASE_URL.

Run once before first start:
  python -m app.db.init_db
"""
import asyncio
import logging

from app.core.logging_config import configure_logging
from app.db.session import Base, engine

# Register every mapped table on Base.metadata
import app.auth.models  # noqa: F401
import app.core.models  # noqa: F401

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))


async def main() -> None:
    configure_logging()
    await create_tables()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
