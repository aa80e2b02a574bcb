"""
Seed script for the default back-office accounts.

Run once (e.g. after init_db) with env set:
  DEFAULT_USER_PASSWORD=YourSecurePassword

Creates (or resets the password of):
- admin     ROLE_ADMIN
- secretar  ROLE_SECRETARY
- profesor  ROLE_PROFESSOR
"""
import asyncio
import logging
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.security import hash_password
from app.core.config import settings
from app.core.enums import Role
from app.core.logging_config import configure_logging
from app.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)

# Used when DEFAULT_USER_PASSWORD is not set (development only)
DEFAULT_PASSWORD = "password123"

DEFAULT_USERS: Tuple[Tuple[str, Role], ...] = (
    ("admin", Role.ADMIN),
    ("secretar", Role.SECRETARY),
    ("profesor", Role.PROFESSOR),
)


async def seed_users(db: AsyncSession, password: str = None) -> None:
    password = password or settings.default_user_password or DEFAULT_PASSWORD
    for username, role in DEFAULT_USERS:
        result = await db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if not user:
            user = User(username=username, password_hash=hash_password(password), enabled=True, authorities=[])
            user.add_authority(role.value)
            db.add(user)
            logger.info("Created user: %s with role: %s", username, role.value)
        else:
            user.password_hash = hash_password(password)
            logger.info("Updated password for user: %s", username)
    await db.commit()


async def main() -> None:
    configure_logging()
    async with AsyncSessionLocal() as db:
        try:
            await seed_users(db)
        except Exception:
            await db.rollback()
            logger.exception("Seeding default users failed")
            raise


if __name__ == "__main__":
    asyncio.run(main())
