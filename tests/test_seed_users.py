import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.security import verify_password
from app.db.seed_users import seed_users


@pytest.mark.asyncio
async def test_seed_creates_default_accounts(db_session: AsyncSession) -> None:
    await seed_users(db_session, password="seed-pass")

    result = await db_session.execute(select(User).order_by(User.username))
    accounts = {u.username: u for u in result.scalars().all()}
    assert set(accounts) == {"admin", "secretar", "profesor"}
    assert accounts["admin"].roles == ["ROLE_ADMIN"]
    assert accounts["secretar"].roles == ["ROLE_SECRETARY"]
    assert accounts["profesor"].roles == ["ROLE_PROFESSOR"]
    assert verify_password("seed-pass", accounts["admin"].password_hash)


@pytest.mark.asyncio
async def test_seed_is_idempotent_and_resets_password(db_session: AsyncSession) -> None:
    await seed_users(db_session, password="first-pass")
    await seed_users(db_session, password="second-pass")

    result = await db_session.execute(select(User))
    users = result.scalars().all()
    assert len(users) == 3
    assert all(verify_password("second-pass", u.password_hash) for u in users)
