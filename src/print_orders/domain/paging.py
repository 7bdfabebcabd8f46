"""Pagination container."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results with the total match count."""

    items: list[T]
    total_count: int
    page: int
    page_size: int

    @property
    def has_next(self) -> bool:
        return self.page * self.page_size < self.total_count


def page_bounds(page: int, page_size: int) -> tuple[int, int]:
    """Return inclusive start/end offsets for a 1-based page."""
    if page < 1 or page_size < 1:
        raise ValueError("page and page_size must be positive")
    start = (page - 1) * page_size
    return start, start + page_size - 1
