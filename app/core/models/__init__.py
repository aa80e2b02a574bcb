from app.core.models.student import Student
from app.core.models.course import Course
from app.core.models.enrollment import Enrollment
from app.core.models.attendance_record import AttendanceRecord
from app.core.models.audit_log import AuditLog

__all__ = [
    "AttendanceRecord",
    "AuditLog",
    "Course",
    "Enrollment",
    "Student",
]
