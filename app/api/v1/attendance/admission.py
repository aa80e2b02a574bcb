"""
Attendance admission rule.

At most ``settings.max_attendance_per_semester`` attendance records may exist
for one (student, course, semester) triple. Creating a record always runs the
check; updating a record runs it only when the update moves the record to a
different triple. In-place edits (date or status only) are never blocked, even
when the triple is already at the cap. Deletes are never checked.

The count-then-insert sequence is not atomic on its own. Callers load the
student row with ``SELECT ... FOR UPDATE`` before counting, which serialises
concurrent admissions for the same student on PostgreSQL; SQLite serialises
all writers anyway.
"""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import LimitExceededError
from app.core.models import AttendanceRecord


def current_limit() -> int:
    return settings.max_attendance_per_semester


async def count_for_triple(
    db: AsyncSession,
    student_id: int,
    course_id: int,
    semester: int,
    exclude_record_id: Optional[int] = None,
) -> int:
    stmt = select(func.count(AttendanceRecord.id)).where(
        AttendanceRecord.student_id == student_id,
        AttendanceRecord.course_id == course_id,
        AttendanceRecord.semester == semester,
    )
    if exclude_record_id is not None:
        stmt = stmt.where(AttendanceRecord.id != exclude_record_id)
    result = await db.execute(stmt)
    return result.scalar_one()


async def check_and_admit(
    db: AsyncSession,
    student_id: int,
    course_id: int,
    semester: int,
    exclude_record_id: Optional[int] = None,
) -> None:
    """Raise LimitExceededError when the triple already holds the maximum. Read-only."""
    limit = current_limit()
    count = await count_for_triple(db, student_id, course_id, semester, exclude_record_id)
    if count >= limit:
        raise LimitExceededError(semester, limit)


def triple_changed(record: AttendanceRecord, student_id: int, course_id: int, semester: int) -> bool:
    return (
        record.student_id != student_id
        or record.course_id != course_id
        or record.semester != semester
    )
