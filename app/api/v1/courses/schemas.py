from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CourseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    professor: str = Field(..., min_length=1, max_length=255)
    credits: int = Field(..., ge=1)
    semester: int = Field(..., ge=1, le=2)


class CourseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    professor: Optional[str] = Field(None, min_length=1, max_length=255)
    credits: Optional[int] = Field(None, ge=1)
    semester: Optional[int] = Field(None, ge=1, le=2)


class CourseResponse(BaseModel):
    id: int
    name: str
    professor: str
    credits: int
    semester: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
