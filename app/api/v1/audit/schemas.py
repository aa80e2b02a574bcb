from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: int
    username: Optional[str] = None
    ip: Optional[str] = None
    action: str
    entity: Optional[str] = None
    entity_id: Optional[int] = None
    payload_json: Optional[str] = None
    timestamp: datetime

    class Config:
        from_attributes = True
