from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.audit.context import AuditContext, get_audit_context
from app.auth.rbac import ADMIN_ROLES, require_roles
from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service
from .schemas import UserCreate, UserResponse, UserUpdate

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
    dependencies=[Depends(require_roles(*ADMIN_ROLES))],
)


@router.get("", response_model=List[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    return await service.list_users(db)


@router.get("/{username}", response_model=UserResponse)
async def get_user(username: str, db: AsyncSession = Depends(get_db)):
    try:
        return await service.get_user(db, username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        return await service.create_user(db, context, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{username}", response_model=UserResponse)
async def update_user(
    username: str,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        return await service.update_user(db, context, username, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{username}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    username: str,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        await service.delete_user(db, context, username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
