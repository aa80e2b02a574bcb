"""Back-office account management. Audit payloads never include passwords."""

from typing import List

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.audit import service as audit_service
from app.api.v1.audit.context import AuditContext
from app.auth.models import User
from app.auth.security import hash_password
from app.core.enums import AuditAction, Role
from app.core.exceptions import DuplicateResourceError, NotFoundError, ServiceError
from app.core.services import flush_or_conflict

from .schemas import UserCreate, UserResponse, UserUpdate

ENTITY = "User"
DUPLICATE_USERNAME_MESSAGE = "A user with this username already exists"
ROLE_PREFIX = "ROLE_"
KNOWN_ROLES = {r.value for r in Role}


def normalize_role(role: str) -> str:
    role = role.strip()
    if role.startswith(ROLE_PREFIX):
        return role
    return ROLE_PREFIX + role.upper()


def _normalize_roles(roles: List[str]) -> List[str]:
    normalized = list(dict.fromkeys(normalize_role(r) for r in roles))
    unknown = [r for r in normalized if r not in KNOWN_ROLES]
    if unknown:
        raise ServiceError(f"Unknown role(s): {', '.join(unknown)}", status.HTTP_400_BAD_REQUEST)
    return normalized


def _to_response(u: User) -> UserResponse:
    return UserResponse(username=u.username, enabled=u.enabled, roles=u.roles)


async def _get_user(db: AsyncSession, username: str) -> User:
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError(ENTITY, username)
    return user


async def list_users(db: AsyncSession) -> List[UserResponse]:
    result = await db.execute(select(User).order_by(User.username))
    return [_to_response(u) for u in result.scalars().all()]


async def get_user(db: AsyncSession, username: str) -> UserResponse:
    return _to_response(await _get_user(db, username))


async def create_user(db: AsyncSession, context: AuditContext, payload: UserCreate) -> UserResponse:
    username = payload.username.strip()
    existing = await db.execute(select(User.username).where(User.username == username))
    if existing.first() is not None:
        raise DuplicateResourceError(DUPLICATE_USERNAME_MESSAGE)
    roles = _normalize_roles(payload.roles)
    user = User(
        username=username,
        password_hash=hash_password(payload.password),
        enabled=payload.enabled if payload.enabled is not None else True,
        authorities=[],
    )
    for role in roles:
        user.add_authority(role)
    db.add(user)
    await flush_or_conflict(db, DUPLICATE_USERNAME_MESSAGE)
    await audit_service.record(
        db,
        context,
        AuditAction.CREATE,
        ENTITY,
        None,
        {"username": username, "roles": roles, "enabled": user.enabled},
    )
    await db.commit()
    return _to_response(user)


async def update_user(
    db: AsyncSession,
    context: AuditContext,
    username: str,
    payload: UserUpdate,
) -> UserResponse:
    user = await _get_user(db, username)
    if payload.password:
        user.password_hash = hash_password(payload.password)
    if payload.enabled is not None:
        user.enabled = payload.enabled
    if payload.roles is not None:
        roles = _normalize_roles(payload.roles)
        user.authorities.clear()
        # Deletes must reach the database before re-inserting the same role names
        await db.flush()
        for role in roles:
            user.add_authority(role)
    await audit_service.record(
        db,
        context,
        AuditAction.UPDATE,
        ENTITY,
        None,
        {"username": username, "roles": user.roles, "enabled": user.enabled},
    )
    await db.commit()
    return _to_response(user)


async def delete_user(db: AsyncSession, context: AuditContext, username: str) -> None:
    user = await _get_user(db, username)
    before = _to_response(user)
    await db.delete(user)
    await audit_service.record(db, context, AuditAction.DELETE, ENTITY, None, before)
    await db.commit()
