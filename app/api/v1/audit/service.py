"""
Audit recorder. Every mutating service call adds exactly one entry through
``record`` before it commits, so the entry shares the mutation's transaction.
Authentication events go through ``record_auth_event`` and commit on their own.
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.models import AuditLog
from app.core.schemas import PageResponse
from app.core.services import paginate

from .context import ANONYMOUS, UNKNOWN, AuditContext
from .schemas import AuditLogResponse

logger = logging.getLogger(__name__)

AUTH_ENTITY = "Auth"


def _action_tag(action: Union[str, Enum]) -> str:
    return action.value if isinstance(action, Enum) else str(action)


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_payload(payload: Any) -> Optional[str]:
    """Compact JSON snapshot of ``payload``; falls back to ``str(payload)``."""
    if payload is None:
        return None
    try:
        return json.dumps(payload, default=_json_default, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        logger.warning("Could not serialize audit payload, storing plain text: %s", exc)
        return str(payload)


async def record(
    db: AsyncSession,
    context: AuditContext,
    action: Union[str, Enum],
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    payload: Any = None,
) -> AuditLog:
    """Append one audit entry to the current transaction. Caller must commit."""
    username = context.username or ANONYMOUS
    ip = context.ip or UNKNOWN
    tag = _action_tag(action)
    entry = AuditLog(
        username=username,
        ip=ip,
        action=tag,
        entity=entity_type,
        entity_id=entity_id,
        payload_json=serialize_payload(payload),
        timestamp=datetime.utcnow(),
    )
    db.add(entry)
    logger.debug("Audit: %s %s %s by %s from %s", tag, entity_type, entity_id, username, ip)
    return entry


async def record_auth_event(
    db: AsyncSession,
    action: Union[str, Enum],
    username: Optional[str],
    ip: Optional[str],
) -> AuditLog:
    """Persist a login/logout/access-denied event in its own commit."""
    tag = _action_tag(action)
    entry = AuditLog(
        username=username or UNKNOWN,
        ip=ip or UNKNOWN,
        action=tag,
        entity=AUTH_ENTITY,
        timestamp=datetime.utcnow(),
    )
    db.add(entry)
    await db.commit()
    logger.info("Auth audit: %s for user %s from %s", tag, entry.username, entry.ip)
    return entry


def _newest_first(stmt):
    return stmt.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())


async def list_entries(db: AsyncSession, page: int, size: int) -> PageResponse[AuditLogResponse]:
    stmt = _newest_first(select(AuditLog))
    return await paginate(db, stmt, page, size, AuditLogResponse.model_validate)


async def list_entries_by_username(
    db: AsyncSession, username: str, page: int, size: int
) -> PageResponse[AuditLogResponse]:
    stmt = _newest_first(select(AuditLog).where(AuditLog.username == username))
    return await paginate(db, stmt, page, size, AuditLogResponse.model_validate)


async def list_entries_by_entity(
    db: AsyncSession, entity_type: str, entity_id: int, page: int, size: int
) -> PageResponse[AuditLogResponse]:
    stmt = _newest_first(
        select(AuditLog).where(AuditLog.entity == entity_type, AuditLog.entity_id == entity_id)
    )
    return await paginate(db, stmt, page, size, AuditLogResponse.model_validate)
