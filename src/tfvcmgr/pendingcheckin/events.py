"""Immutable events fired by the PendingCheckin facets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from tfvcmgr.models import CheckinNote, PendingChange, WorkItemCheckinInfo


@dataclass(slots=True, frozen=True)
class AllPendingChangesChangedEvent:
    changes: tuple[PendingChange, ...]


@dataclass(slots=True, frozen=True)
class CheckedPendingChangesChangedEvent:
    changes: tuple[PendingChange, ...]


@dataclass(slots=True, frozen=True)
class CommentChangedEvent:
    comment: str


@dataclass(slots=True, frozen=True)
class AffectedScopesChangedEvent:
    scope_paths: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class CheckinNotesChangedEvent:
    notes: CheckinNote


@dataclass(slots=True, frozen=True)
class CheckedWorkItemsChangedEvent:
    work_items: tuple[WorkItemCheckinInfo, ...]


@dataclass(slots=True, frozen=True)
class PolicyEvaluatorChangedEvent:
    evaluator: Optional[Any]
