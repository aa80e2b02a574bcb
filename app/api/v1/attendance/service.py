"""Attendance service: CRUD guarded by the admission rule, plus search and statistics."""

from typing import List

from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.audit import service as audit_service
from app.api.v1.audit.context import AuditContext
from app.api.v1.courses import service as course_service
from app.api.v1.students import service as student_service
from app.core.enums import AttendanceStatus, AuditAction
from app.core.exceptions import NotFoundError
from app.core.models import AttendanceRecord, Course, Student
from app.core.schemas import PageResponse
from app.core.services import paginate

from . import admission
from .schemas import (
    AttendanceRequest,
    AttendanceResponse,
    AttendanceSearchParams,
    AttendanceStatsResponse,
)

ENTITY = "Attendance"


def _to_response(a: AttendanceRecord) -> AttendanceResponse:
    return AttendanceResponse(
        id=a.id,
        student_id=a.student_id,
        student_name=a.student.full_name,
        course_id=a.course_id,
        course_name=a.course.name,
        date=a.date,
        semester=a.semester,
        status=a.status,
    )


async def get_attendance_by_id(db: AsyncSession, attendance_id: int) -> AttendanceRecord:
    result = await db.execute(select(AttendanceRecord).where(AttendanceRecord.id == attendance_id))
    record = result.unique().scalar_one_or_none()
    if not record:
        raise NotFoundError(ENTITY, attendance_id)
    return record


async def list_attendance(db: AsyncSession, page: int, size: int) -> PageResponse[AttendanceResponse]:
    stmt = select(AttendanceRecord).order_by(AttendanceRecord.date.desc(), AttendanceRecord.id.desc())
    return await paginate(db, stmt, page, size, _to_response)


async def search_attendance(db: AsyncSession, params: AttendanceSearchParams) -> List[AttendanceResponse]:
    stmt = (
        select(AttendanceRecord)
        .join(Student, AttendanceRecord.student_id == Student.id)
        .join(Course, AttendanceRecord.course_id == Course.id)
    )
    if params.student_name:
        stmt = stmt.where(Student.last_name.ilike(f"%{params.student_name.strip()}%"))
    if params.course_name:
        stmt = stmt.where(Course.name.ilike(f"%{params.course_name.strip()}%"))
    if params.semester is not None:
        stmt = stmt.where(AttendanceRecord.semester == params.semester)
    stmt = stmt.order_by(AttendanceRecord.date.desc(), AttendanceRecord.id.desc())
    result = await db.execute(stmt)
    return [_to_response(a) for a in result.unique().scalars().all()]


async def get_attendance(db: AsyncSession, attendance_id: int) -> AttendanceResponse:
    return _to_response(await get_attendance_by_id(db, attendance_id))


async def create_attendance(
    db: AsyncSession,
    context: AuditContext,
    payload: AttendanceRequest,
) -> AttendanceResponse:
    # Student row lock narrows the count-then-insert window; see admission module.
    student = await student_service.get_student_by_id(db, payload.student_id, for_update=True)
    course = await course_service.get_course_by_id(db, payload.course_id)
    await admission.check_and_admit(db, student.id, course.id, payload.semester)

    obj = AttendanceRecord(
        student_id=student.id,
        course_id=course.id,
        date=payload.date,
        semester=payload.semester,
        status=payload.status.value,
    )
    db.add(obj)
    await db.flush()
    await audit_service.record(db, context, AuditAction.CREATE, ENTITY, obj.id, payload)
    await db.commit()
    await db.refresh(obj)
    return _to_response(obj)


async def update_attendance(
    db: AsyncSession,
    context: AuditContext,
    attendance_id: int,
    payload: AttendanceRequest,
) -> AttendanceResponse:
    obj = await get_attendance_by_id(db, attendance_id)

    if admission.triple_changed(obj, payload.student_id, payload.course_id, payload.semester):
        student = await student_service.get_student_by_id(db, payload.student_id, for_update=True)
        course = await course_service.get_course_by_id(db, payload.course_id)
        await admission.check_and_admit(
            db, student.id, course.id, payload.semester, exclude_record_id=attendance_id
        )
        obj.student_id = student.id
        obj.course_id = course.id
        obj.semester = payload.semester

    obj.date = payload.date
    obj.status = payload.status.value
    await audit_service.record(db, context, AuditAction.UPDATE, ENTITY, attendance_id, payload)
    await db.commit()
    await db.refresh(obj)
    return _to_response(obj)


async def delete_attendance(db: AsyncSession, context: AuditContext, attendance_id: int) -> None:
    obj = await get_attendance_by_id(db, attendance_id)
    before = _to_response(obj)
    await db.delete(obj)
    await audit_service.record(db, context, AuditAction.DELETE, ENTITY, attendance_id, before)
    await db.commit()


async def get_statistics(db: AsyncSession) -> List[AttendanceStatsResponse]:
    present = AttendanceRecord.status == AttendanceStatus.PRESENT.value
    sem1 = func.sum(case((and_(AttendanceRecord.semester == 1, present), 1), else_=0))
    sem2 = func.sum(case((and_(AttendanceRecord.semester == 2, present), 1), else_=0))
    stmt = (
        select(Student.id, Student.last_name, Student.first_name, sem1, sem2)
        .join(AttendanceRecord, AttendanceRecord.student_id == Student.id)
        .group_by(Student.id, Student.last_name, Student.first_name)
        .order_by(Student.last_name, Student.first_name)
    )
    result = await db.execute(stmt)
    return [
        AttendanceStatsResponse(
            student_id=row[0],
            student_name=f"{row[1]} {row[2]}",
            semester1_count=row[3] or 0,
            semester2_count=row[4] or 0,
        )
        for row in result.all()
    ]
