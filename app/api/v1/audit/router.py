"""Audit log API router (admin only)."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import ADMIN_ROLES, require_roles
from app.core.schemas import PageResponse
from app.core.services import clamp_page_size
from app.db.session import get_db

from . import service
from .schemas import AuditLogResponse

router = APIRouter(prefix="/api/audit", tags=["audit"])

AUDIT_DEFAULT_PAGE_SIZE = 50
AUDIT_MAX_PAGE_SIZE = 200


@router.get(
    "",
    response_model=PageResponse[AuditLogResponse],
    dependencies=[Depends(require_roles(*ADMIN_ROLES))],
)
async def list_audit_entries(
    page: int = Query(0, ge=0),
    size: int = Query(AUDIT_DEFAULT_PAGE_SIZE, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """All audit entries, newest first."""
    return await service.list_entries(db, page, clamp_page_size(size, AUDIT_MAX_PAGE_SIZE))


@router.get(
    "/user/{username}",
    response_model=PageResponse[AuditLogResponse],
    dependencies=[Depends(require_roles(*ADMIN_ROLES))],
)
async def list_audit_entries_by_username(
    username: str,
    page: int = Query(0, ge=0),
    size: int = Query(AUDIT_DEFAULT_PAGE_SIZE, ge=1),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_entries_by_username(
        db, username, page, clamp_page_size(size, AUDIT_MAX_PAGE_SIZE)
    )


@router.get(
    "/entity/{entity_type}/{entity_id}",
    response_model=PageResponse[AuditLogResponse],
    dependencies=[Depends(require_roles(*ADMIN_ROLES))],
)
async def list_audit_entries_by_entity(
    entity_type: str,
    entity_id: int,
    page: int = Query(0, ge=0),
    size: int = Query(AUDIT_DEFAULT_PAGE_SIZE, ge=1),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_entries_by_entity(
        db, entity_type, entity_id, page, clamp_page_size(size, AUDIT_MAX_PAGE_SIZE)
    )
