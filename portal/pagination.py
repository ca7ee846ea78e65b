"""
Pagination over the ranked opportunity list.
"""
import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 6


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    total_pages: int

    @property
    def has_navigation(self) -> bool:
        return self.total_pages > 1


def total_pages(length: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    """Number of pages; 0 when there is nothing to show."""
    if page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    return math.ceil(max(length, 0) / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Clamp a requested page into [1, pages]. An empty list sits on page 1."""
    try:
        page = int(page)
    except OverflowError:
        # +/- infinity
        page = pages if page > 0 else 1
    except (TypeError, ValueError):
        page = 1
    return max(1, min(page, max(pages, 1)))


def paginate(items: Sequence[T], page: int, page_size: int = DEFAULT_PAGE_SIZE) -> Page[T]:
    """Slice ``items`` to the window for ``page`` after clamping it."""
    if page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    pages = total_pages(len(items), page_size)
    page = clamp_page(page, pages)
    start = (page - 1) * page_size
    return Page(items=list(items[start:start + page_size]), page=page, total_pages=pages)


class PageCursor:
    """Holds the current page index for a list whose length may change."""

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE):
        self.page_size = page_size if page_size > 0 else DEFAULT_PAGE_SIZE
        self.page = 1
        self._length = 0

    @property
    def total_pages(self) -> int:
        return total_pages(self._length, self.page_size)

    def resize(self, length: int):
        """Track a new list length and keep the page in range."""
        self._length = max(length, 0)
        self.page = clamp_page(self.page, self.total_pages)

    def reset(self, length: int):
        self._length = max(length, 0)
        self.page = 1

    def set_page(self, page: int) -> int:
        self.page = clamp_page(page, self.total_pages)
        return self.page

    def next(self) -> int:
        if self.page < self.total_pages:
            self.page += 1
        return self.page

    def previous(self) -> int:
        if self.page > 1:
            self.page -= 1
        return self.page

    def window(self, items: Sequence[T]) -> Page[T]:
        return paginate(items, self.page, self.page_size)
