from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.audit import service as audit_service
from app.api.v1.audit.context import AuditContext
from app.core.enums import AuditAction
from app.core.exceptions import DuplicateResourceError, NotFoundError
from app.core.models import Student
from app.core.schemas import PageResponse
from app.core.services import flush_or_conflict, paginate

from .schemas import StudentCreate, StudentResponse, StudentUpdate

ENTITY = "Student"
DUPLICATE_EMAIL_MESSAGE = "A student with this email already exists"


def _to_response(s: Student) -> StudentResponse:
    return StudentResponse.model_validate(s)


async def _email_taken(db: AsyncSession, email: str, exclude_student_id: Optional[int] = None) -> bool:
    stmt = select(Student.id).where(Student.email == email)
    if exclude_student_id is not None:
        stmt = stmt.where(Student.id != exclude_student_id)
    result = await db.execute(stmt)
    return result.first() is not None


async def get_student_by_id(db: AsyncSession, student_id: int, for_update: bool = False) -> Student:
    """Load a student or raise NotFoundError. ``for_update`` takes a row lock where supported."""
    stmt = select(Student).where(Student.id == student_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    student = result.scalar_one_or_none()
    if not student:
        raise NotFoundError(ENTITY, student_id)
    return student


async def list_students(
    db: AsyncSession,
    query: Optional[str],
    study_year: Optional[int],
    page: int,
    size: int,
) -> PageResponse[StudentResponse]:
    stmt = select(Student)
    if query:
        pattern = f"%{query.strip()}%"
        stmt = stmt.where(
            or_(
                Student.last_name.ilike(pattern),
                Student.first_name.ilike(pattern),
                Student.email.ilike(pattern),
            )
        )
    if study_year is not None:
        stmt = stmt.where(Student.study_year == study_year)
    stmt = stmt.order_by(Student.last_name, Student.first_name, Student.id)
    return await paginate(db, stmt, page, size, _to_response)


async def get_student(db: AsyncSession, student_id: int) -> StudentResponse:
    return _to_response(await get_student_by_id(db, student_id))


async def create_student(
    db: AsyncSession,
    context: AuditContext,
    payload: StudentCreate,
) -> StudentResponse:
    email = payload.email.strip().lower()
    if await _email_taken(db, email):
        raise DuplicateResourceError(DUPLICATE_EMAIL_MESSAGE)
    obj = Student(
        last_name=payload.last_name.strip(),
        first_name=payload.first_name.strip(),
        email=email,
        phone=payload.phone,
        study_year=payload.study_year,
    )
    db.add(obj)
    await flush_or_conflict(db, DUPLICATE_EMAIL_MESSAGE)  # populates obj.id for the audit entry
    await audit_service.record(db, context, AuditAction.CREATE, ENTITY, obj.id, payload)
    await db.commit()
    await db.refresh(obj)
    return _to_response(obj)


async def update_student(
    db: AsyncSession,
    context: AuditContext,
    student_id: int,
    payload: StudentUpdate,
) -> StudentResponse:
    """Apply the fields present in ``payload``; serves both PUT and PATCH."""
    obj = await get_student_by_id(db, student_id)
    changes = payload.model_dump(exclude_unset=True)
    if "email" in changes and changes["email"] is not None:
        changes["email"] = changes["email"].strip().lower()
        if changes["email"] != obj.email and await _email_taken(db, changes["email"], student_id):
            raise DuplicateResourceError(DUPLICATE_EMAIL_MESSAGE)
    for field in ("last_name", "first_name", "email", "study_year"):
        if changes.get(field) is not None:
            value = changes[field]
            setattr(obj, field, value.strip() if isinstance(value, str) else value)
    if "phone" in changes:
        obj.phone = changes["phone"]
    await flush_or_conflict(db, DUPLICATE_EMAIL_MESSAGE)
    await audit_service.record(db, context, AuditAction.UPDATE, ENTITY, student_id, changes)
    await db.commit()
    await db.refresh(obj)
    return _to_response(obj)


async def delete_student(db: AsyncSession, context: AuditContext, student_id: int) -> None:
    obj = await get_student_by_id(db, student_id)
    before = _to_response(obj)
    await db.delete(obj)
    await audit_service.record(db, context, AuditAction.DELETE, ENTITY, student_id, before)
    await db.commit()
