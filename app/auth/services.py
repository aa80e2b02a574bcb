import logging
from datetime import datetime, timezone

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.audit import service as audit_service
from app.api.v1.audit.context import UNKNOWN
from app.auth.models import User
from app.auth.schemas import CurrentUser, LoginRequest, LoginResponse
from app.auth.security import create_access_token, verify_password
from app.core.enums import AuditAction
from app.core.exceptions import ServiceError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


async def login_user(db: AsyncSession, payload: LoginRequest, ip: str) -> LoginResponse:
    """Verify credentials and issue an access token; both outcomes are audited."""
    username = payload.username.strip()
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if not user or not user.enabled or not verify_password(payload.password, user.password_hash):
        await audit_service.record_auth_event(db, AuditAction.LOGIN_FAILED, username or UNKNOWN, ip)
        raise ServiceError(INVALID_CREDENTIALS_MESSAGE, status.HTTP_401_UNAUTHORIZED)

    roles = user.roles
    access_token = create_access_token(user.username, roles)
    await audit_service.record_auth_event(db, AuditAction.LOGIN_SUCCESS, user.username, ip)
    return LoginResponse(
        access_token=access_token,
        username=user.username,
        roles=roles,
        issued_at=datetime.now(timezone.utc),
    )


async def logout_user(db: AsyncSession, current_user: CurrentUser, ip: str) -> None:
    # Tokens are stateless; logout is recorded and the client discards its token.
    await audit_service.record_auth_event(db, AuditAction.LOGOUT, current_user.username, ip)
