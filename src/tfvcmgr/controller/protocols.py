"""
Narrow interfaces of the server-side collaborators.

Anything satisfying these protocols can be injected: the REST controller in
this package, a SOAP client, or a test fake.
"""

from __future__ import annotations

from enum import Enum, Flag, auto
from typing import TYPE_CHECKING, Optional, Protocol, Sequence

from tfvcmgr.models import (
    CheckinConflict,
    CheckinNoteFieldDefinition,
    Item,
    ItemType,
    PendingChange,
    PolicyEvaluatorState,
    PolicyFailure,
)

if TYPE_CHECKING:  # pragma: no cover
    from tfvcmgr.pendingcheckin.aggregate import PendingCheckin
    from tfvcmgr.policy.context import PolicyContext


class DeletedState(str, Enum):
    NON_DELETED = "non_deleted"
    DELETED = "deleted"
    ANY = "any"


class RecursionType(str, Enum):
    NONE = "none"
    ONE_LEVEL = "one_level"
    FULL = "full"


class GetItemsOptions(Flag):
    NONE = 0
    INCLUDE_BRANCH_INFO = auto()
    INCLUDE_SOURCE_RENAMES = auto()
    UNSORTED = auto()


class ItemQueryService(Protocol):
    def query_items_extended(
        self,
        paths: Sequence[str],
        item_type: ItemType,
        deleted_state: DeletedState,
        recursion: RecursionType,
        options: GetItemsOptions,
    ) -> list[list[Item]]:
        """
        Return one result list per requested path.

        With RecursionType.ONE_LEVEL each list holds the item at the path
        followed by its direct children.
        """
        ...


class ConflictDetector(Protocol):
    def detect_conflicts(self, checked_changes: Sequence[PendingChange]) -> Sequence[CheckinConflict]:
        ...


class CheckinNoteDefinitionSource(Protocol):
    def query_checkin_note_field_definitions(
        self,
        scope_paths: Sequence[str],
    ) -> Sequence[CheckinNoteFieldDefinition]:
        ...


class PendingChangeCache(Protocol):
    def get_pending_changes_by_server_path_recursive(self, server_path: str) -> list[PendingChange]:
        ...

    def get_pending_change_by_server_path(self, server_path: str) -> Optional[PendingChange]:
        ...

    def has_pending_changes_by_local_path_recursive(self, local_path: str) -> bool:
        ...


class PolicyEvaluator(Protocol):
    """Both evaluate calls may raise PolicyEvaluationCancelledError."""

    def get_pending_checkin(self) -> Optional["PendingCheckin"]:
        ...

    def set_pending_checkin(self, pending_checkin: Optional["PendingCheckin"]) -> None:
        ...

    def evaluate(self, context: "PolicyContext") -> Sequence[PolicyFailure]:
        ...

    def reload_and_evaluate(self, context: "PolicyContext") -> Sequence[PolicyFailure]:
        ...

    def get_policy_evaluator_state(self) -> PolicyEvaluatorState:
        ...
