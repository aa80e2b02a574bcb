from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    username: str
    roles: List[str]
    issued_at: datetime


class CurrentUser(BaseModel):
    """Authenticated principal resolved from the bearer token."""

    username: str
    roles: List[str] = Field(default_factory=list)

    def has_any_role(self, *roles: str) -> bool:
        return any(r in self.roles for r in roles)


class MeResponse(BaseModel):
    username: Optional[str] = None
    roles: List[str] = Field(default_factory=list)
    message: str
