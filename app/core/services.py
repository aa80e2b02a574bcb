"""Shared query helpers for the resource services."""

import math
from typing import Callable, TypeVar

from sqlalchemy import Select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateResourceError
from app.core.schemas import PageResponse

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def clamp_page_size(size: int, maximum: int = MAX_PAGE_SIZE) -> int:
    return max(1, min(size, maximum))


async def paginate(
    db: AsyncSession,
    stmt: Select,
    page: int,
    size: int,
    to_response: Callable[[object], T],
) -> PageResponse[T]:
    """Run ``stmt`` for one page and wrap the rows with total counts."""
    page = max(page, 0)
    count_stmt = stmt.with_only_columns(func.count(), maintain_column_froms=True).order_by(None)
    total = (await db.execute(count_stmt)).scalar_one()
    result = await db.execute(stmt.offset(page * size).limit(size))
    rows = result.scalars().unique().all()
    total_pages = math.ceil(total / size) if size else 0
    return PageResponse(
        data=[to_response(r) for r in rows],
        page=page,
        size=size,
        total_elements=total,
        total_pages=total_pages,
        first=page == 0,
        last=page + 1 >= total_pages,
    )


async def flush_or_conflict(db: AsyncSession, conflict_message: str) -> None:
    """
    Flush the pending entity changes; a uniqueness violation becomes a 409.

    Call before the audit entry is added, so that only the entity's own
    statements can be reported as a conflict. Failures of the later commit
    propagate unchanged.
    """
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateResourceError(conflict_message)
