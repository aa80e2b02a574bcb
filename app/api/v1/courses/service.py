from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.audit import service as audit_service
from app.api.v1.audit.context import AuditContext
from app.core.enums import AuditAction
from app.core.exceptions import NotFoundError
from app.core.models import Course
from app.core.schemas import PageResponse
from app.core.services import paginate

from .schemas import CourseCreate, CourseResponse, CourseUpdate

ENTITY = "Course"


def _to_response(c: Course) -> CourseResponse:
    return CourseResponse.model_validate(c)


async def get_course_by_id(db: AsyncSession, course_id: int) -> Course:
    result = await db.execute(select(Course).where(Course.id == course_id))
    course = result.scalar_one_or_none()
    if not course:
        raise NotFoundError(ENTITY, course_id)
    return course


async def list_courses(
    db: AsyncSession,
    query: Optional[str],
    semester: Optional[int],
    page: int,
    size: int,
) -> PageResponse[CourseResponse]:
    stmt = select(Course)
    if query:
        pattern = f"%{query.strip()}%"
        stmt = stmt.where(or_(Course.name.ilike(pattern), Course.professor.ilike(pattern)))
    if semester is not None:
        stmt = stmt.where(Course.semester == semester)
    stmt = stmt.order_by(Course.name, Course.id)
    return await paginate(db, stmt, page, size, _to_response)


async def get_course(db: AsyncSession, course_id: int) -> CourseResponse:
    return _to_response(await get_course_by_id(db, course_id))


async def create_course(
    db: AsyncSession,
    context: AuditContext,
    payload: CourseCreate,
) -> CourseResponse:
    obj = Course(
        name=payload.name.strip(),
        professor=payload.professor.strip(),
        credits=payload.credits,
        semester=payload.semester,
    )
    db.add(obj)
    await db.flush()
    await audit_service.record(db, context, AuditAction.CREATE, ENTITY, obj.id, payload)
    await db.commit()
    await db.refresh(obj)
    return _to_response(obj)


async def update_course(
    db: AsyncSession,
    context: AuditContext,
    course_id: int,
    payload: CourseUpdate,
) -> CourseResponse:
    obj = await get_course_by_id(db, course_id)
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None:
            continue
        setattr(obj, field, value.strip() if isinstance(value, str) else value)
    await audit_service.record(db, context, AuditAction.UPDATE, ENTITY, course_id, changes)
    await db.commit()
    await db.refresh(obj)
    return _to_response(obj)


async def delete_course(db: AsyncSession, context: AuditContext, course_id: int) -> None:
    obj = await get_course_by_id(db, course_id)
    before = _to_response(obj)
    await db.delete(obj)
    await audit_service.record(db, context, AuditAction.DELETE, ENTITY, course_id, before)
    await db.commit()
