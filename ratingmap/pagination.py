"""Pagination of a title's chapter sequence into fixed-size grid pages."""

import math
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def total_pages(n_items: int, page_size: int) -> int:
    """Number of pages needed for n_items. Zero items → zero pages."""
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return math.ceil(n_items / page_size)


def page_slice(items: Sequence[T], page: int, page_size: int) -> list[T]:
    """Return items[page*P : min((page+1)*P, n)].

    Raises:
        ValueError: if page is outside [0, total_pages). Callers are expected
            to keep navigation within bounds via Paginator.
    """
    pages = total_pages(len(items), page_size)
    if not 0 <= page < pages:
        raise ValueError(f"Page index {page} out of bounds for {pages} pages")
    start = page * page_size
    return list(items[start:min(start + page_size, len(items))])


class Paginator:
    """Bounds-aware page arithmetic for one chapter sequence."""

    def __init__(self, n_items: int, page_size: int) -> None:
        self.n_items = n_items
        self.page_size = page_size
        self.total_pages = total_pages(n_items, page_size)

    def has_previous(self, page: int) -> bool:
        return page > 0

    def has_next(self, page: int) -> bool:
        return page < self.total_pages - 1

    def is_valid(self, page: int) -> bool:
        return 0 <= page < self.total_pages

    def clamp(self, page: int) -> int:
        if self.total_pages == 0:
            return 0
        return min(max(page, 0), self.total_pages - 1)

    def page_of(self, index: int) -> int:
        """Page holding the item at zero-based sequence index."""
        return index // self.page_size

    def page_range(self, page: int) -> tuple[int, int]:
        """1-based (first, last) item positions shown on a page.

        An empty sequence yields (0, 0).
        """
        if self.n_items == 0:
            return (0, 0)
        start = page * self.page_size
        return (start + 1, min(start + self.page_size, self.n_items))
