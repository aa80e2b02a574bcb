from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class EnrollmentCreate(BaseModel):
    student_id: int
    course_id: int
    final_grade: Optional[Decimal] = Field(None, ge=1, le=10, max_digits=4, decimal_places=2)


class EnrollmentUpdate(BaseModel):
    final_grade: Optional[Decimal] = Field(None, ge=1, le=10, max_digits=4, decimal_places=2)


class EnrollmentResponse(BaseModel):
    student_id: int
    student_name: str
    course_id: int
    course_name: str
    final_grade: Optional[Decimal] = None
    created_at: datetime
    updated_at: datetime
