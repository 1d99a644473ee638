"""Boolean match predicate over :class:`FilterCriteria`."""

from __future__ import annotations

from typing import Iterable, Iterator

from .criteria import FilterCriteria


def matches(word: str, criteria: FilterCriteria) -> bool:
    """Return whether ``word`` satisfies every constraint in ``criteria``.

    Checks run cheapest first and stop at the first failure; the result does
    not depend on the order because every check is a pure conjunct.
    """

    candidate = word.strip().lower()

    required_length = criteria.required_length
    if required_length is not None and len(candidate) != required_length:
        return False

    if criteria.starts_with and not candidate.startswith(criteria.starts_with):
        return False
    if criteria.ends_with and not candidate.endswith(criteria.ends_with):
        return False

    if criteria.letters or criteria.absent_letters:
        present = set(candidate)
        if not criteria.letters <= present:
            return False
        if not criteria.absent_letters.isdisjoint(present):
            return False

    for slot, char in zip(criteria.pattern, candidate):
        if slot is not None and slot != char:
            return False

    return True


def filter_words(words: Iterable[str], criteria: FilterCriteria) -> Iterator[str]:
    """Lazily yield the words from ``words`` that match ``criteria``."""

    for word in words:
        if matches(word, criteria):
            yield word


__all__ = ["matches", "filter_words"]
