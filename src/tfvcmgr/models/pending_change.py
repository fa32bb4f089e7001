"""Pending (queued, not yet submitted) changes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Flag, auto
from typing import Optional

from .item import ItemType


class ChangeType(Flag):
    """Set of change kinds carried by one pending change."""

    NONE = 0
    ADD = auto()
    EDIT = auto()
    ENCODING = auto()
    RENAME = auto()
    DELETE = auto()
    UNDELETE = auto()
    BRANCH = auto()
    MERGE = auto()
    LOCK = auto()
    ROLLBACK = auto()
    SOURCE_RENAME = auto()
    PROPERTY = auto()

    def contains(self, other: "ChangeType") -> bool:
        return (self & other) == other

    def contains_any(self, other: "ChangeType") -> bool:
        return bool(self & other)

    def to_display_string(self) -> str:
        """Comma separated lower-case names, e.g. "add, edit"."""
        names = [
            member.name.lower().replace("_", " ")
            for member in type(self)
            if member.value and member in self
        ]
        return ", ".join(names)


@dataclass(slots=True, frozen=True)
class PendingChange:
    """
    A change the user has queued in the workspace.

    Notes:
        - source_server_item is only set for renames and branches.
        - version is the workspace version the change is based on.
    """

    server_item: str
    change_type: ChangeType
    item_type: ItemType = ItemType.FILE

    local_item: Optional[str] = None
    source_server_item: Optional[str] = None
    source_local_item: Optional[str] = None
    version: int = 0

    def is_add(self) -> bool:
        return self.change_type.contains(ChangeType.ADD)

    def is_delete(self) -> bool:
        return self.change_type.contains(ChangeType.DELETE)
