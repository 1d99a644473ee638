"""Search criteria model and normalisation of raw form input."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

from ..utils.observability import get_logger
from .errors import InvalidCriteria
from .field_help import FieldId

PAGE_SIZE = 100

WILDCARD_CHARACTERS = frozenset("?_.* ")
DISPLAY_WILDCARD = "?"

# camelCase spellings sent by the browser form.
_FIELD_ALIASES: Dict[str, FieldId] = {
    "absentLetters": FieldId.ABSENT_LETTERS,
    "startsWith": FieldId.STARTS_WITH,
    "endsWith": FieldId.ENDS_WITH,
}

_logger = get_logger(__name__).bind(component="criteria")

PatternSlot = Optional[str]


@dataclass(frozen=True)
class FilterCriteria:
    """Normalised, validated set of active search constraints.

    Every field is optional; an unset field (empty string, empty set, empty
    pattern or ``None`` size) never excludes a word.
    """

    letters: FrozenSet[str] = field(default_factory=frozenset)
    absent_letters: FrozenSet[str] = field(default_factory=frozenset)
    starts_with: str = ""
    ends_with: str = ""
    pattern: Tuple[PatternSlot, ...] = ()
    size: Optional[int] = None

    @property
    def required_length(self) -> Optional[int]:
        """Exact word length implied by the criteria.

        A pattern fixes the length by itself and takes precedence over an
        explicit ``size`` that disagrees with it.
        """

        if self.pattern:
            return len(self.pattern)
        return self.size

    @property
    def is_empty(self) -> bool:
        return self == FilterCriteria()

    @property
    def pattern_text(self) -> str:
        return "".join(DISPLAY_WILDCARD if slot is None else slot for slot in self.pattern)

    def to_form(self) -> Dict[str, str]:
        """Return the criteria as form-field strings keyed by field id."""

        return {
            FieldId.LETTERS.value: "".join(sorted(self.letters)),
            FieldId.ABSENT_LETTERS.value: "".join(sorted(self.absent_letters)),
            FieldId.STARTS_WITH.value: self.starts_with,
            FieldId.ENDS_WITH.value: self.ends_with,
            FieldId.PATTERN.value: self.pattern_text,
            FieldId.SIZE.value: "" if self.size is None else str(self.size),
        }


RawCriteria = Union[FilterCriteria, Mapping[str, Any], None]


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def _letter_set(value: Any) -> FrozenSet[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        chunks: Iterable[Any] = (value,)
    else:
        chunks = value
    letters = set()
    for chunk in chunks:
        letters.update(ch for ch in _clean_text(chunk) if ch.isalpha())
    return frozenset(letters)


def parse_pattern(value: Any) -> Tuple[PatternSlot, ...]:
    """Convert raw pattern text into slots, ``None`` marking a wildcard."""

    text = _clean_text(value)
    return tuple(None if ch in WILDCARD_CHARACTERS else ch for ch in text)


def parse_size(value: Any) -> Optional[int]:
    """Parse a word length; blank means unset.

    Raises:
        InvalidCriteria: the value is not a positive whole number.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidCriteria(FieldId.SIZE.value, value)
    if isinstance(value, int):
        size = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise InvalidCriteria(FieldId.SIZE.value, value)
        size = int(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            size = int(text)
        except ValueError:
            raise InvalidCriteria(FieldId.SIZE.value, value) from None
    if size <= 0:
        raise InvalidCriteria(FieldId.SIZE.value, value)
    return size


def _field_values(raw: Mapping[str, Any]) -> Dict[FieldId, Any]:
    values: Dict[FieldId, Any] = {}
    for key, value in raw.items():
        field_id = _FIELD_ALIASES.get(str(key))
        if field_id is None:
            try:
                field_id = FieldId(str(key))
            except ValueError:
                _logger.debug("Ignoring unknown criteria field", context={"field": key})
                continue
        values[field_id] = value
    return values


def normalize(raw: RawCriteria) -> FilterCriteria:
    """Build a :class:`FilterCriteria` from raw form input.

    Text is trimmed and lower-cased, letter fields are reduced to sets of
    alphabetic characters, and an unusable ``size`` is dropped rather than
    reported.
    """

    if raw is None:
        return FilterCriteria()
    if isinstance(raw, FilterCriteria):
        return raw

    values = _field_values(raw)

    try:
        size = parse_size(values.get(FieldId.SIZE))
    except InvalidCriteria as exc:
        _logger.debug("Dropping invalid size", context={"value": repr(exc.value)})
        size = None

    return FilterCriteria(
        letters=_letter_set(values.get(FieldId.LETTERS)),
        absent_letters=_letter_set(values.get(FieldId.ABSENT_LETTERS)),
        starts_with=_clean_text(values.get(FieldId.STARTS_WITH)),
        ends_with=_clean_text(values.get(FieldId.ENDS_WITH)),
        pattern=parse_pattern(values.get(FieldId.PATTERN)),
        size=size,
    )


__all__ = [
    "PAGE_SIZE",
    "WILDCARD_CHARACTERS",
    "FilterCriteria",
    "RawCriteria",
    "normalize",
    "parse_pattern",
    "parse_size",
]
