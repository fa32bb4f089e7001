"""Check-in note models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True, frozen=True)
class CheckinNoteFieldDefinition:
    """A note field a team project declares (e.g. "Code Reviewer")."""

    server_item: str
    name: str
    required: bool = False
    display_order: int = 0


@dataclass(slots=True, frozen=True)
class CheckinNoteFieldValue:
    name: str
    value: str


@dataclass(slots=True, frozen=True)
class CheckinNote:
    """The note values the user filled in for a checkin."""

    values: tuple[CheckinNoteFieldValue, ...] = ()

    def get_value(self, name: str) -> Optional[str]:
        """Look up a value by field name, ignoring case and surrounding whitespace."""
        wanted = name.strip().casefold()
        for v in self.values:
            if v.name.strip().casefold() == wanted:
                return v.value
        return None


@dataclass(slots=True, frozen=True)
class CheckinNoteFailure:
    definition: CheckinNoteFieldDefinition
    message: str
