from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.audit import service as audit_service
from app.api.v1.audit.context import resolve_client_ip
from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.enums import AuditAction, Role
from app.db.session import get_db

READ_ROLES = (Role.ADMIN, Role.SECRETARY, Role.PROFESSOR)
WRITE_ROLES = (Role.ADMIN, Role.SECRETARY)
DELETE_ROLES = (Role.ADMIN,)
ADMIN_ROLES = (Role.ADMIN,)

ACCESS_DENIED_MESSAGE = "You do not have permission to access this resource"


def require_roles(*roles: Role):
    """
    Dependency factory: allow the request when the caller holds any of ``roles``.

    A rejected caller is recorded as ACCESS_DENIED before the 403 is raised.

    Example:
        Depends(require_roles(*WRITE_ROLES))
    """
    allowed = tuple(r.value for r in roles)

    async def _checker(
        request: Request,
        db: AsyncSession = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if not current_user.has_any_role(*allowed):
            await audit_service.record_auth_event(
                db,
                AuditAction.ACCESS_DENIED,
                current_user.username,
                resolve_client_ip(request),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=ACCESS_DENIED_MESSAGE,
            )
        return current_user

    return _checker
