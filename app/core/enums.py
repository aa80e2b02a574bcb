from enum import Enum


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    EXCUSED = "excused"


class Role(str, Enum):
    ADMIN = "ROLE_ADMIN"
    SECRETARY = "ROLE_SECRETARY"
    PROFESSOR = "ROLE_PROFESSOR"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    ACCESS_DENIED = "ACCESS_DENIED"


class ExportType(str, Enum):
    STUDENTS = "students"
    COURSES = "courses"
    ATTENDANCE = "attendance"
    ENROLLMENTS = "enrollments"
