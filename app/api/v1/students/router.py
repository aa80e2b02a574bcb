from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.audit.context import AuditContext, get_audit_context
from app.auth.rbac import DELETE_ROLES, READ_ROLES, WRITE_ROLES, require_roles
from app.core.exceptions import ServiceError
from app.core.schemas import PageResponse
from app.core.services import DEFAULT_PAGE_SIZE, clamp_page_size
from app.db.session import get_db

from . import service
from .schemas import StudentCreate, StudentResponse, StudentUpdate

router = APIRouter(prefix="/api/students", tags=["students"])


@router.get(
    "",
    response_model=PageResponse[StudentResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_students(
    q: Optional[str] = Query(None, description="Matches last name, first name or email"),
    study_year: Optional[int] = Query(None, ge=1, le=6),
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_students(db, q, study_year, page, clamp_page_size(size))


@router.get(
    "/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_student(student_id: int, db: AsyncSession = Depends(get_db)):
    try:
        return await service.get_student(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        return await service.create_student(db, context, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put(
    "/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def replace_student(
    student_id: int,
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        return await service.update_student(
            db, context, student_id, StudentUpdate(**payload.model_dump())
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch(
    "/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_student(
    student_id: int,
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        return await service.update_student(db, context, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(*DELETE_ROLES))],
)
async def delete_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        await service.delete_student(db, context, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
