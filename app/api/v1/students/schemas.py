from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class StudentCreate(BaseModel):
    last_name: str = Field(..., min_length=1, max_length=100)
    first_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20)
    study_year: int = Field(..., ge=1, le=6)


class StudentUpdate(BaseModel):
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    study_year: Optional[int] = Field(None, ge=1, le=6)


class StudentResponse(BaseModel):
    id: int
    last_name: str
    first_name: str
    email: str
    phone: Optional[str] = None
    study_year: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
