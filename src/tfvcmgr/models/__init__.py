"""Public model exports for tfvcmgr."""

from __future__ import annotations

from .item import ChildrenState, FolderItem, Item, ItemType
from .notes import (
    CheckinNote,
    CheckinNoteFailure,
    CheckinNoteFieldDefinition,
    CheckinNoteFieldValue,
)
from .pending_change import ChangeType, PendingChange
from .results import (
    CheckinConflict,
    CheckinEvaluationResult,
    EvaluationCanceled,
    PolicyEvaluatorState,
    PolicyFailure,
)
from .work_items import CheckinWorkItemAction, WorkItemCheckinInfo

__all__ = [
    "Item",
    "FolderItem",
    "ItemType",
    "ChildrenState",
    "ChangeType",
    "PendingChange",
    "CheckinNoteFieldDefinition",
    "CheckinNoteFieldValue",
    "CheckinNote",
    "CheckinNoteFailure",
    "CheckinConflict",
    "PolicyFailure",
    "PolicyEvaluatorState",
    "CheckinEvaluationResult",
    "EvaluationCanceled",
    "WorkItemCheckinInfo",
    "CheckinWorkItemAction",
]
