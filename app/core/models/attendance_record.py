from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.db.session import Base


class AttendanceRecord(Base):
    """One attendance mark for a student in a course on a date.

    The number of rows per (student_id, course_id, semester) is capped by
    ``settings.max_attendance_per_semester``; see ``app.api.v1.attendance.admission``.
    """

    __tablename__ = "attendance"
    __table_args__ = (
        CheckConstraint("semester IN (1, 2)", name="ck_attendance_semester"),
        CheckConstraint("status IN ('present', 'absent', 'excused')", name="ck_attendance_status"),
        Index("ix_attendance_triple", "student_id", "course_id", "semester"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    semester = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False)  # present, absent, excused
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="attendance_records", lazy="joined")
    course = relationship("Course", back_populates="attendance_records", lazy="joined")
