from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from app.db.session import Base


class Course(Base):
    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("semester IN (1, 2)", name="ck_course_semester"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    professor = Column(String(255), nullable=False)
    credits = Column(Integer, nullable=False)
    semester = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    enrollments = relationship(
        "Enrollment", back_populates="course", cascade="all, delete-orphan", passive_deletes=True
    )
    attendance_records = relationship(
        "AttendanceRecord", back_populates="course", cascade="all, delete-orphan", passive_deletes=True
    )
