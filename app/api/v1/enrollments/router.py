from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.audit.context import AuditContext, get_audit_context
from app.auth.rbac import DELETE_ROLES, READ_ROLES, WRITE_ROLES, require_roles
from app.core.exceptions import ServiceError
from app.core.schemas import PageResponse
from app.core.services import DEFAULT_PAGE_SIZE, clamp_page_size
from app.db.session import get_db

from . import service
from .schemas import EnrollmentCreate, EnrollmentResponse, EnrollmentUpdate

router = APIRouter(prefix="/api/enrollments", tags=["enrollments"])


@router.get(
    "",
    response_model=PageResponse[EnrollmentResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_enrollments(
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_enrollments(db, page, clamp_page_size(size))


@router.get(
    "/filter",
    response_model=List[EnrollmentResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def filter_enrollments(
    student_id: Optional[int] = Query(None),
    course_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await service.filter_enrollments(db, student_id, course_id)


@router.get(
    "/{student_id}/{course_id}",
    response_model=EnrollmentResponse,
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_enrollment(student_id: int, course_id: int, db: AsyncSession = Depends(get_db)):
    try:
        return await service.get_enrollment(db, student_id, course_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def create_enrollment(
    payload: EnrollmentCreate,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        return await service.create_enrollment(db, context, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put(
    "/{student_id}/{course_id}",
    response_model=EnrollmentResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_enrollment(
    student_id: int,
    course_id: int,
    payload: EnrollmentUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        return await service.update_enrollment(db, context, student_id, course_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{student_id}/{course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(*DELETE_ROLES))],
)
async def delete_enrollment(
    student_id: int,
    course_id: int,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        await service.delete_enrollment(db, context, student_id, course_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
