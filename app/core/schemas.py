from typing import Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PageResponse(BaseModel, Generic[T]):
    """One page of a list endpoint, zero-based."""

    data: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool
