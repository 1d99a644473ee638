"""Exception types raised by the word finder."""

from __future__ import annotations


class WordFinderError(Exception):
    """Base class for word finder errors."""


class InvalidCriteria(WordFinderError, ValueError):
    """A raw criteria value could not be normalised.

    Raised by the field parsers and absorbed by :func:`normalize`, which
    treats the offending field as unset.
    """

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"invalid value for {field!r}: {value!r}")
        self.field = field
        self.value = value


class ProviderError(WordFinderError):
    """The word-data provider failed to answer a search."""


class NavigationError(WordFinderError):
    """A pagination move was attempted while it is not allowed."""


class SessionReentryError(WordFinderError, RuntimeError):
    """A session operation was started while another one is mutating state."""


__all__ = [
    "WordFinderError",
    "InvalidCriteria",
    "ProviderError",
    "NavigationError",
    "SessionReentryError",
]
