"""Enrollment service. Enrollments are keyed by (student_id, course_id), so
audit entries for them carry no entity id; the key travels in the payload."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.audit import service as audit_service
from app.api.v1.audit.context import AuditContext
from app.api.v1.courses import service as course_service
from app.api.v1.students import service as student_service
from app.core.enums import AuditAction
from app.core.exceptions import DuplicateResourceError, NotFoundError
from app.core.models import Course, Enrollment, Student
from app.core.schemas import PageResponse
from app.core.services import flush_or_conflict, paginate

from .schemas import EnrollmentCreate, EnrollmentResponse, EnrollmentUpdate

ENTITY = "Enrollment"
DUPLICATE_ENROLLMENT_MESSAGE = "The student is already enrolled in this course"


def _to_response(e: Enrollment) -> EnrollmentResponse:
    return EnrollmentResponse(
        student_id=e.student_id,
        student_name=e.student.full_name,
        course_id=e.course_id,
        course_name=e.course.name,
        final_grade=e.final_grade,
        created_at=e.created_at,
        updated_at=e.updated_at,
    )


def _not_found(student_id: int, course_id: int) -> NotFoundError:
    return NotFoundError(
        ENTITY,
        message=f"Enrollment for student {student_id} in course {course_id} not found",
    )


async def _get_enrollment(db: AsyncSession, student_id: int, course_id: int) -> Optional[Enrollment]:
    result = await db.execute(
        select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
        )
    )
    return result.unique().scalar_one_or_none()


async def list_enrollments(db: AsyncSession, page: int, size: int) -> PageResponse[EnrollmentResponse]:
    stmt = (
        select(Enrollment)
        .join(Student, Enrollment.student_id == Student.id)
        .join(Course, Enrollment.course_id == Course.id)
        .order_by(Student.last_name, Student.first_name, Course.name)
    )
    return await paginate(db, stmt, page, size, _to_response)


async def filter_enrollments(
    db: AsyncSession,
    student_id: Optional[int],
    course_id: Optional[int],
) -> List[EnrollmentResponse]:
    stmt = select(Enrollment)
    if student_id is not None:
        stmt = stmt.where(Enrollment.student_id == student_id)
    if course_id is not None:
        stmt = stmt.where(Enrollment.course_id == course_id)
    stmt = stmt.order_by(Enrollment.student_id, Enrollment.course_id)
    result = await db.execute(stmt)
    return [_to_response(e) for e in result.unique().scalars().all()]


async def get_enrollment(db: AsyncSession, student_id: int, course_id: int) -> EnrollmentResponse:
    obj = await _get_enrollment(db, student_id, course_id)
    if not obj:
        raise _not_found(student_id, course_id)
    return _to_response(obj)


async def create_enrollment(
    db: AsyncSession,
    context: AuditContext,
    payload: EnrollmentCreate,
) -> EnrollmentResponse:
    if await _get_enrollment(db, payload.student_id, payload.course_id):
        raise DuplicateResourceError(DUPLICATE_ENROLLMENT_MESSAGE)
    student = await student_service.get_student_by_id(db, payload.student_id)
    course = await course_service.get_course_by_id(db, payload.course_id)
    obj = Enrollment(
        student_id=student.id,
        course_id=course.id,
        final_grade=payload.final_grade,
    )
    db.add(obj)
    await flush_or_conflict(db, DUPLICATE_ENROLLMENT_MESSAGE)
    await audit_service.record(db, context, AuditAction.CREATE, ENTITY, None, payload)
    await db.commit()
    await db.refresh(obj)
    return _to_response(obj)


async def update_enrollment(
    db: AsyncSession,
    context: AuditContext,
    student_id: int,
    course_id: int,
    payload: EnrollmentUpdate,
) -> EnrollmentResponse:
    obj = await _get_enrollment(db, student_id, course_id)
    if not obj:
        raise _not_found(student_id, course_id)
    obj.final_grade = payload.final_grade
    await audit_service.record(
        db,
        context,
        AuditAction.UPDATE,
        ENTITY,
        None,
        {"student_id": student_id, "course_id": course_id, "final_grade": payload.final_grade},
    )
    await db.commit()
    await db.refresh(obj)
    return _to_response(obj)


async def delete_enrollment(
    db: AsyncSession,
    context: AuditContext,
    student_id: int,
    course_id: int,
) -> None:
    obj = await _get_enrollment(db, student_id, course_id)
    if not obj:
        raise _not_found(student_id, course_id)
    before = _to_response(obj)
    await db.delete(obj)
    await audit_service.record(db, context, AuditAction.DELETE, ENTITY, None, before)
    await db.commit()
