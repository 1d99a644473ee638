"""Pure search-criteria model and match predicate."""

from .criteria import (
    PAGE_SIZE,
    FilterCriteria,
    RawCriteria,
    normalize,
    parse_pattern,
    parse_size,
)
from .errors import (
    InvalidCriteria,
    NavigationError,
    ProviderError,
    SessionReentryError,
    WordFinderError,
)
from .field_help import FIELD_HELP, FieldHelp, FieldId
from .matching import filter_words, matches

__all__ = [
    "PAGE_SIZE",
    "FilterCriteria",
    "RawCriteria",
    "normalize",
    "parse_pattern",
    "parse_size",
    "matches",
    "filter_words",
    "FieldId",
    "FieldHelp",
    "FIELD_HELP",
    "WordFinderError",
    "InvalidCriteria",
    "ProviderError",
    "NavigationError",
    "SessionReentryError",
]
