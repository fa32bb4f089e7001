"""Pending checkin aggregate and its evaluation pipeline."""

from __future__ import annotations

from .affected_scopes import AffectedScopeTracker
from .aggregate import (
    PendingCheckin,
    PendingCheckinNotes,
    PendingCheckinPendingChanges,
    PendingCheckinPolicies,
    PendingCheckinWorkItems,
)
from .evaluation import CheckinEvaluationPipeline, EvaluationOutcome
from .events import (
    AffectedScopesChangedEvent,
    AllPendingChangesChangedEvent,
    CheckedPendingChangesChangedEvent,
    CheckedWorkItemsChangedEvent,
    CheckinNotesChangedEvent,
    CommentChangedEvent,
    PolicyEvaluatorChangedEvent,
)
from .options import CheckinEvaluationOptions

__all__ = [
    "AffectedScopeTracker",
    "PendingCheckin",
    "PendingCheckinPendingChanges",
    "PendingCheckinNotes",
    "PendingCheckinPolicies",
    "PendingCheckinWorkItems",
    "CheckinEvaluationPipeline",
    "CheckinEvaluationOptions",
    "EvaluationOutcome",
    "AllPendingChangesChangedEvent",
    "CheckedPendingChangesChangedEvent",
    "CommentChangedEvent",
    "AffectedScopesChangedEvent",
    "CheckinNotesChangedEvent",
    "CheckedWorkItemsChangedEvent",
    "PolicyEvaluatorChangedEvent",
]
