"""Append-only cache of fetched result pages."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from word_finder.core import PAGE_SIZE

Page = Tuple[str, ...]


class PageCache:
    """Ordered store of result pages for the current criteria.

    Pages are indexed by arrival order and frozen as tuples on append; they
    are never patched afterwards. There is no eviction.
    """

    def __init__(self, page_size: int = PAGE_SIZE) -> None:
        self.page_size = int(page_size)
        self._pages: List[Page] = []

    def append(self, page: Iterable[str]) -> int:
        frozen = tuple(page)
        if len(frozen) > self.page_size:
            raise ValueError(
                f"page holds {len(frozen)} words, more than the page size {self.page_size}"
            )
        self._pages.append(frozen)
        return len(self._pages) - 1

    def get(self, index: int) -> Optional[Page]:
        if 0 <= index < len(self._pages):
            return self._pages[index]
        return None

    def clear(self) -> None:
        self._pages.clear()

    def pages(self) -> Tuple[Page, ...]:
        return tuple(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and 0 <= index < len(self._pages)


__all__ = ["Page", "PageCache"]
