"""Who is acting and from where, as seen by the audit recorder."""

import logging
from typing import Optional

from fastapi import Depends, Request
from pydantic import BaseModel

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"
UNKNOWN = "unknown"
FORWARDED_FOR_HEADER = "X-Forwarded-For"


class AuditContext(BaseModel):
    """Actor identity and client address passed explicitly into the recorder."""

    username: str = ANONYMOUS
    ip: str = UNKNOWN


def resolve_client_ip(request: Optional[Request]) -> str:
    """First X-Forwarded-For hop if present, else the peer address, else "unknown"."""
    if request is None:
        return UNKNOWN
    try:
        forwarded = request.headers.get(FORWARDED_FOR_HEADER)
        if forwarded:
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop
        if request.client and request.client.host:
            return request.client.host
    except (AttributeError, KeyError, ValueError) as exc:
        logger.warning("Could not determine client IP address: %s", exc)
    return UNKNOWN


def build_audit_context(request: Optional[Request], username: Optional[str]) -> AuditContext:
    return AuditContext(
        username=username or ANONYMOUS,
        ip=resolve_client_ip(request),
    )


async def get_audit_context(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
) -> AuditContext:
    """Dependency: audit context for the authenticated caller of this request."""
    return build_audit_context(request, current_user.username)
