"""
The pending checkin aggregate.

A PendingCheckin is created per checkin attempt, mutated by the caller until
submission, and discarded afterwards. It is plain composition of four
facets, each with its own lock and its own listener lists:

    pending_changes  all known changes, checked subset, comment, scopes
    notes            check-in note values + last queried field definitions
    policies         bound policy evaluator
    work_items       checked work item links

Every set_* commits first, then notifies listeners synchronously on the
calling thread, in registration order.
"""

from __future__ import annotations

import threading
from typing import Callable, Iterable, Optional, Sequence

from tfvcmgr.controller.protocols import PolicyEvaluator
from tfvcmgr.local.validators import check_not_none
from tfvcmgr.models import (
    CheckinNote,
    CheckinNoteFieldDefinition,
    PendingChange,
    PolicyEvaluatorState,
    WorkItemCheckinInfo,
)
from tfvcmgr.util import ListenerList

from .affected_scopes import AffectedScopeTracker
from .events import (
    AffectedScopesChangedEvent,
    AllPendingChangesChangedEvent,
    CheckedPendingChangesChangedEvent,
    CheckedWorkItemsChangedEvent,
    CheckinNotesChangedEvent,
    CommentChangedEvent,
    PolicyEvaluatorChangedEvent,
)


class PendingCheckinPendingChanges:
    def __init__(
        self,
        all_changes: Iterable[PendingChange] = (),
        checked_changes: Optional[Iterable[PendingChange]] = None,
        comment: str = "",
        on_scopes_changed: Optional[Callable[[], None]] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._on_scopes_changed = on_scopes_changed
        self._all: tuple[PendingChange, ...] = tuple(all_changes)
        self._checked: tuple[PendingChange, ...] = (
            tuple(checked_changes) if checked_changes is not None else self._all
        )
        self._comment = comment or ""
        self._scopes = AffectedScopeTracker()
        self._scopes.set(self._checked)

        self._all_listeners: ListenerList[AllPendingChangesChangedEvent] = ListenerList()
        self._checked_listeners: ListenerList[CheckedPendingChangesChangedEvent] = ListenerList()
        self._comment_listeners: ListenerList[CommentChangedEvent] = ListenerList()
        self._scope_listeners: ListenerList[AffectedScopesChangedEvent] = ListenerList()

    # all pending changes
    def get_all_pending_changes(self) -> tuple[PendingChange, ...]:
        with self._lock:
            return self._all

    def set_all_pending_changes(self, changes: Iterable[PendingChange]) -> None:
        snapshot = tuple(changes)
        with self._lock:
            self._all = snapshot
        self._all_listeners.fire(AllPendingChangesChangedEvent(snapshot))

    def add_all_pending_changes_changed_listener(
        self, listener: Callable[[AllPendingChangesChangedEvent], None]
    ) -> None:
        self._all_listeners.add(listener)

    def remove_all_pending_changes_changed_listener(
        self, listener: Callable[[AllPendingChangesChangedEvent], None]
    ) -> None:
        self._all_listeners.remove(listener)

    # checked pending changes
    def get_checked_pending_changes(self) -> tuple[PendingChange, ...]:
        with self._lock:
            return self._checked

    def set_checked_pending_changes(self, changes: Iterable[PendingChange]) -> None:
        """
        Replace the checked subset.

        Fires CheckedPendingChangesChangedEvent, then AffectedScopesChangedEvent
        if (and only if) the affected scopes changed. on_scopes_changed runs
        before any listener.
        """
        snapshot = tuple(changes)
        with self._lock:
            self._checked = snapshot
            scopes_changed = self._scopes.set(snapshot)

        if scopes_changed and self._on_scopes_changed is not None:
            self._on_scopes_changed()
        self._checked_listeners.fire(CheckedPendingChangesChangedEvent(snapshot))
        if scopes_changed:
            self._scope_listeners.fire(AffectedScopesChangedEvent(self._scopes.get_scope_paths()))

    def add_checked_pending_changes_changed_listener(
        self, listener: Callable[[CheckedPendingChangesChangedEvent], None]
    ) -> None:
        self._checked_listeners.add(listener)

    def remove_checked_pending_changes_changed_listener(
        self, listener: Callable[[CheckedPendingChangesChangedEvent], None]
    ) -> None:
        self._checked_listeners.remove(listener)

    # comment
    def get_comment(self) -> str:
        with self._lock:
            return self._comment

    def set_comment(self, comment: Optional[str]) -> None:
        value = comment or ""
        with self._lock:
            self._comment = value
        self._comment_listeners.fire(CommentChangedEvent(value))

    def add_comment_changed_listener(self, listener: Callable[[CommentChangedEvent], None]) -> None:
        self._comment_listeners.add(listener)

    def remove_comment_changed_listener(self, listener: Callable[[CommentChangedEvent], None]) -> None:
        self._comment_listeners.remove(listener)

    # affected scopes
    def get_affected_scope_paths(self) -> tuple[str, ...]:
        return self._scopes.get_scope_paths()

    def add_affected_scopes_changed_listener(
        self, listener: Callable[[AffectedScopesChangedEvent], None]
    ) -> None:
        self._scope_listeners.add(listener)

    def remove_affected_scopes_changed_listener(
        self, listener: Callable[[AffectedScopesChangedEvent], None]
    ) -> None:
        self._scope_listeners.remove(listener)


class PendingCheckinNotes:
    def __init__(self, notes: Optional[CheckinNote] = None) -> None:
        self._lock = threading.Lock()
        self._notes = notes or CheckinNote()
        self._definitions: Optional[tuple[CheckinNoteFieldDefinition, ...]] = None
        self._listeners: ListenerList[CheckinNotesChangedEvent] = ListenerList()

    def get_checkin_notes(self) -> CheckinNote:
        with self._lock:
            return self._notes

    def set_checkin_notes(self, notes: CheckinNote) -> None:
        check_not_none(notes, "notes")
        with self._lock:
            self._notes = notes
        self._listeners.fire(CheckinNotesChangedEvent(notes))

    def get_field_definitions(self) -> Optional[tuple[CheckinNoteFieldDefinition, ...]]:
        """Definitions from the last evaluation, or None if they must be queried."""
        with self._lock:
            return self._definitions

    def set_field_definitions(self, definitions: Sequence[CheckinNoteFieldDefinition]) -> None:
        with self._lock:
            self._definitions = tuple(definitions)

    def clear_field_definitions(self) -> None:
        with self._lock:
            self._definitions = None

    def add_checkin_notes_changed_listener(self, listener: Callable[[CheckinNotesChangedEvent], None]) -> None:
        self._listeners.add(listener)

    def remove_checkin_notes_changed_listener(self, listener: Callable[[CheckinNotesChangedEvent], None]) -> None:
        self._listeners.remove(listener)


class PendingCheckinPolicies:
    def __init__(self, evaluator: Optional[PolicyEvaluator] = None) -> None:
        self._lock = threading.Lock()
        self._evaluator = evaluator
        self._listeners: ListenerList[PolicyEvaluatorChangedEvent] = ListenerList()

    def get_policy_evaluator(self) -> Optional[PolicyEvaluator]:
        with self._lock:
            return self._evaluator

    def set_policy_evaluator(self, evaluator: Optional[PolicyEvaluator]) -> None:
        with self._lock:
            self._evaluator = evaluator
        self._listeners.fire(PolicyEvaluatorChangedEvent(evaluator))

    def get_policy_evaluator_state(self) -> Optional[PolicyEvaluatorState]:
        evaluator = self.get_policy_evaluator()
        if evaluator is None:
            return None
        return evaluator.get_policy_evaluator_state()

    def add_policy_evaluator_changed_listener(
        self, listener: Callable[[PolicyEvaluatorChangedEvent], None]
    ) -> None:
        self._listeners.add(listener)

    def remove_policy_evaluator_changed_listener(
        self, listener: Callable[[PolicyEvaluatorChangedEvent], None]
    ) -> None:
        self._listeners.remove(listener)


class PendingCheckinWorkItems:
    def __init__(self, work_items: Iterable[WorkItemCheckinInfo] = ()) -> None:
        self._lock = threading.Lock()
        self._work_items: tuple[WorkItemCheckinInfo, ...] = tuple(work_items)
        self._listeners: ListenerList[CheckedWorkItemsChangedEvent] = ListenerList()

    def get_checked_work_items(self) -> tuple[WorkItemCheckinInfo, ...]:
        with self._lock:
            return self._work_items

    def set_checked_work_items(self, work_items: Iterable[WorkItemCheckinInfo]) -> None:
        snapshot = tuple(work_items)
        with self._lock:
            self._work_items = snapshot
        self._listeners.fire(CheckedWorkItemsChangedEvent(snapshot))

    def add_checked_work_items_changed_listener(
        self, listener: Callable[[CheckedWorkItemsChangedEvent], None]
    ) -> None:
        self._listeners.add(listener)

    def remove_checked_work_items_changed_listener(
        self, listener: Callable[[CheckedWorkItemsChangedEvent], None]
    ) -> None:
        self._listeners.remove(listener)


class PendingCheckin:
    """A candidate checkin: four independently mutable facets."""

    def __init__(
        self,
        all_changes: Iterable[PendingChange] = (),
        checked_changes: Optional[Iterable[PendingChange]] = None,
        *,
        comment: str = "",
        notes: Optional[CheckinNote] = None,
        work_items: Iterable[WorkItemCheckinInfo] = (),
        policy_evaluator: Optional[PolicyEvaluator] = None,
    ) -> None:
        self._notes = PendingCheckinNotes(notes)
        # definitions were queried for the old scopes
        self._pending_changes = PendingCheckinPendingChanges(
            all_changes,
            checked_changes,
            comment,
            on_scopes_changed=self._notes.clear_field_definitions,
        )
        self._policies = PendingCheckinPolicies(policy_evaluator)
        self._work_items = PendingCheckinWorkItems(work_items)

    @property
    def pending_changes(self) -> PendingCheckinPendingChanges:
        return self._pending_changes

    @property
    def notes(self) -> PendingCheckinNotes:
        return self._notes

    @property
    def policies(self) -> PendingCheckinPolicies:
        return self._policies

    @property
    def work_items(self) -> PendingCheckinWorkItems:
        return self._work_items
