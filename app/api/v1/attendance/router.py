"""Attendance API router."""

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
from .schemas import (
    AttendanceRequest,
    AttendanceResponse,
    AttendanceSearchParams,
    AttendanceStatsResponse,
)

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


@router.get(
    "",
    response_model=PageResponse[AttendanceResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_attendance(
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Attendance records, most recent date first."""
    return await service.list_attendance(db, page, clamp_page_size(size))


@router.get(
    "/search",
    response_model=List[AttendanceResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def search_attendance(
    student: Optional[str] = Query(None, description="Student last name contains"),
    course: Optional[str] = Query(None, description="Course name contains"),
    semester: Optional[int] = Query(None, ge=1, le=2),
    db: AsyncSession = Depends(get_db),
):
    params = AttendanceSearchParams(student_name=student, course_name=course, semester=semester)
    return await service.search_attendance(db, params)


@router.get(
    "/stats",
    response_model=List[AttendanceStatsResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_attendance_statistics(db: AsyncSession = Depends(get_db)):
    """Present marks per student for semester 1 and semester 2."""
    return await service.get_statistics(db)


@router.get(
    "/{attendance_id}",
    response_model=AttendanceResponse,
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_attendance(attendance_id: int, db: AsyncSession = Depends(get_db)):
    try:
        return await service.get_attendance(db, attendance_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "",
    response_model=AttendanceResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def create_attendance(
    payload: AttendanceRequest,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    """Record attendance. Rejected with 422 once the semester cap is reached."""
    try:
        return await service.create_attendance(db, context, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put(
    "/{attendance_id}",
    response_model=AttendanceResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_attendance(
    attendance_id: int,
    payload: AttendanceRequest,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        return await service.update_attendance(db, context, attendance_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{attendance_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(*DELETE_ROLES))],
)
async def delete_attendance(
    attendance_id: int,
    db: AsyncSession = Depends(get_db),
    context: AuditContext = Depends(get_audit_context),
):
    try:
        await service.delete_attendance(db, context, attendance_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
