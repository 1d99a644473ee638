"""Static help text for each search field."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


class FieldId(str, Enum):
    """Closed set of criteria fields shown on the search form."""

    LETTERS = "letters"
    ABSENT_LETTERS = "absent_letters"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    PATTERN = "pattern"
    SIZE = "size"


@dataclass(frozen=True)
class FieldHelp:
    label: str
    placeholder: str
    title: str
    lines: Tuple[str, ...]

    def as_info(self) -> str:
        return " ".join(self.lines)


FIELD_HELP: Mapping[FieldId, FieldHelp] = MappingProxyType(
    {
        FieldId.LETTERS: FieldHelp(
            label="Letters",
            placeholder="Letters the word contains",
            title="Letters",
            lines=(
                "Every letter typed here must appear somewhere in the word.",
                "Order and position do not matter.",
            ),
        ),
        FieldId.ABSENT_LETTERS: FieldHelp(
            label="Absent letters",
            placeholder="Letters the word must not contain",
            title="Absent letters",
            lines=("Words containing any of these letters are left out.",),
        ),
        FieldId.STARTS_WITH: FieldHelp(
            label="Starts with",
            placeholder="Beginning of the word",
            title="Starts with",
            lines=("Only words beginning with this text are shown.",),
        ),
        FieldId.ENDS_WITH: FieldHelp(
            label="Ends with",
            placeholder="End of the word",
            title="Ends with",
            lines=("Only words ending with this text are shown.",),
        ),
        FieldId.PATTERN: FieldHelp(
            label="Pattern",
            placeholder="e.g. a??e",
            title="Pattern",
            lines=(
                "Type known letters in place and ? (or _) for unknown ones.",
                "The pattern also fixes the word length and wins over Size.",
            ),
        ),
        FieldId.SIZE: FieldHelp(
            label="Size",
            placeholder="Number of letters",
            title="Size",
            lines=("Only words with exactly this many letters are shown.",),
        ),
    }
)


__all__ = ["FieldId", "FieldHelp", "FIELD_HELP"]
