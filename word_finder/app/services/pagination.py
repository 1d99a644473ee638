"""Page index tracking and navigation legality."""

from __future__ import annotations

from typing import Optional

from word_finder.core import NavigationError

from .page_cache import Page, PageCache


class PaginationController:
    """Tracks the current page over a :class:`PageCache`.

    Result exhaustion is inferred from the pages themselves: a page shorter
    than the page size is the last one. The index may equal ``len(cache)``
    while that page is still to be fetched; the owning session turns
    :meth:`needs_fetch` into a provider request.
    """

    def __init__(self, cache: PageCache) -> None:
        self._cache = cache
        self._index = 0

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def page_size(self) -> int:
        return self._cache.page_size

    def current_page(self) -> Optional[Page]:
        return self._cache.get(self._index)

    def needs_fetch(self) -> bool:
        return self._index not in self._cache

    def can_next(self) -> bool:
        page = self.current_page()
        return page is not None and len(page) == self.page_size

    def can_previous(self) -> bool:
        return self._index > 0

    def advance(self) -> int:
        if not self.can_next():
            raise NavigationError(f"no page after {self._index}")
        self._index += 1
        return self._index

    def retreat(self) -> int:
        if not self.can_previous():
            raise NavigationError("already on the first page")
        self._index -= 1
        return self._index

    def rewind_to(self, index: int) -> None:
        if not 0 <= index <= len(self._cache):
            raise NavigationError(f"page {index} is outside the cached range")
        self._index = index

    def reset_to_first_page(self) -> None:
        self._index = 0


__all__ = ["PaginationController"]
