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
from .schemas import CourseCreate, CourseResponse, CourseUpdate

router = APIRouter(prefix="/api/courses", tags=["courses"])


@router.get(
    "",
    response_model=PageResponse[CourseResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_courses(
    q: Optional[str] = Query(None, description="Matches course name or professor"),
    semester: Optional[int] = Query(None, ge=1, le=2),
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_courses(db, q, semester, page, clamp_page_size(size))


@router.get(
    "/{course_id}",
    response_model=CourseResponse,
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_course(course_id: int, db: AsyncSession = Depends(get_db)):
    try:
        return await service.get_course(db, course_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def create_course(
    payload: CourseCreate,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        return await service.create_course(db, context, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put(
    "/{course_id}",
    response_model=CourseResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def replace_course(
    course_id: int,
    payload: CourseCreate,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        return await service.update_course(
            db, context, course_id, CourseUpdate(**payload.model_dump())
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch(
    "/{course_id}",
    response_model=CourseResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_course(
    course_id: int,
    payload: CourseUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        return await service.update_course(db, context, course_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(*DELETE_ROLES))],
)
async def delete_course(
    course_id: int,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        await service.delete_course(db, context, course_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
