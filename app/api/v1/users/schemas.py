from typing import List, Optional

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    enabled: Optional[bool] = None
    roles: List[str] = Field(..., min_length=1, description="ADMIN, SECRETARY, PROFESSOR (ROLE_ prefix optional)")


class UserUpdate(BaseModel):
    password: Optional[str] = Field(None, min_length=6)
    enabled: Optional[bool] = None
    roles: Optional[List[str]] = Field(None, min_length=1)


class UserResponse(BaseModel):
    username: str
    enabled: bool
    roles: List[str]
