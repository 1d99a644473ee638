"""Word-data provider contract and an in-memory implementation."""

from __future__ import annotations

import itertools
from typing import Iterable, List, Protocol, Sequence, runtime_checkable

from word_finder.core import FilterCriteria, filter_words

from ...utils.observability import get_logger


@runtime_checkable
class WordProvider(Protocol):
    """Source of matching words, queried one page at a time.

    ``search`` returns at most ``limit`` words starting at ``offset`` in a
    stable order, and returns fewer than ``limit`` only when the matches are
    exhausted. Transport or storage failures raise
    :class:`~word_finder.core.ProviderError`.
    """

    def search(
        self,
        criteria: FilterCriteria,
        offset: int,
        limit: int,
    ) -> Sequence[str]:
        ...


def normalize_word(value: str) -> str:
    return str(value or "").strip().lower()


def _validate_window(offset: int, limit: int) -> None:
    if offset < 0:
        raise ValueError("offset must be >= 0")
    if limit <= 0:
        raise ValueError("limit must be > 0")


class InMemoryWordProvider:
    """Provider answering from a word list held in memory."""

    def __init__(self, words: Iterable[str]) -> None:
        unique = {normalize_word(word) for word in words}
        unique.discard("")
        self._words: List[str] = sorted(unique)
        self._logger = get_logger(__name__).bind(component="memory_provider")
        self._logger.info("In-memory word list loaded", context={"word_count": len(self._words)})

    def __len__(self) -> int:
        return len(self._words)

    def search(self, criteria: FilterCriteria, offset: int, limit: int) -> List[str]:
        _validate_window(offset, limit)
        matched = filter_words(self._words, criteria)
        return list(itertools.islice(matched, offset, offset + limit))


__all__ = ["WordProvider", "InMemoryWordProvider", "normalize_word"]
