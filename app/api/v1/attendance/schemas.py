from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from app.core.enums import AttendanceStatus


class AttendanceRequest(BaseModel):
    """Create or replace an attendance record."""

    student_id: int
    course_id: int
    date: date
    semester: int = Field(..., ge=1, le=2)
    status: AttendanceStatus = Field(..., description="present, absent, excused")


class AttendanceResponse(BaseModel):
    id: int
    student_id: int
    student_name: str
    course_id: int
    course_name: str
    date: date
    semester: int
    status: str


class AttendanceStatsResponse(BaseModel):
    """Present marks per semester for one student."""

    student_id: int
    student_name: str
    semester1_count: int
    semester2_count: int


class AttendanceSearchParams(BaseModel):
    student_name: Optional[str] = None
    course_name: Optional[str] = None
    semester: Optional[int] = Field(None, ge=1, le=2)
