"""Loads and evaluates the check-in policies that apply to a pending checkin."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

from tfvcmgr.errors import (
    InvalidStateError,
    PolicyEvaluationCancelledError,
    PolicyEvaluationError,
    PolicyLoadError,
    TransportError,
)
from tfvcmgr.local.validators import check_not_none
from tfvcmgr.models import PolicyEvaluatorState, PolicyFailure
from tfvcmgr.util import ListenerList

from .context import PolicyContext
from .definitions import (
    CheckinPolicy,
    LoadErrorPolicy,
    PolicyDefinition,
    PolicyDefinitionSource,
    PolicyLoader,
)

if TYPE_CHECKING:  # pragma: no cover
    from tfvcmgr.pendingcheckin.aggregate import PendingCheckin

logger = logging.getLogger(__name__)

_RELOAD_STATES = (
    PolicyEvaluatorState.UNEVALUATED,
    PolicyEvaluatorState.POLICIES_LOAD_ERROR,
    PolicyEvaluatorState.CANCELLED,
)


@dataclass(slots=True, frozen=True)
class PolicyEvaluatorStateChangedEvent:
    state: PolicyEvaluatorState


@dataclass(slots=True, frozen=True)
class PolicyLoadErrorEvent:
    error: BaseException


@dataclass(slots=True)
class _PolicyStatus:
    policy: CheckinPolicy
    priority: int
    failures: tuple[PolicyFailure, ...] = field(default_factory=tuple)


class PolicyEvaluator:
    """
    Evaluates the enabled policies of the affected team projects.

    Notes:
        - Policies are (re)loaded when the state is UNEVALUATED,
          POLICIES_LOAD_ERROR or CANCELLED.
        - A policy that cannot be resolved, created or initialized is replaced
          by a LoadErrorPolicy and the state becomes POLICIES_LOAD_ERROR.
        - Any change on the bound pending checkin resets the state to
          UNEVALUATED.
        - A TransportError from the definition source propagates unchanged;
          any other unexpected failure is raised as PolicyEvaluationError.
    """

    def __init__(self, definition_source: PolicyDefinitionSource, loader: PolicyLoader) -> None:
        check_not_none(definition_source, "definition_source")
        check_not_none(loader, "loader")

        self._definition_source = definition_source
        self._loader = loader

        self._lock = threading.RLock()
        self._state = PolicyEvaluatorState.UNEVALUATED
        self._statuses: list[_PolicyStatus] = []
        self._pending_checkin: Optional["PendingCheckin"] = None
        self._closed = False

        self._state_listeners: ListenerList[PolicyEvaluatorStateChangedEvent] = ListenerList()
        self._load_error_listeners: ListenerList[PolicyLoadErrorEvent] = ListenerList()

    # ----------------------------
    # Listeners
    # ----------------------------
    def add_policy_evaluator_state_changed_listener(
        self,
        listener: Callable[[PolicyEvaluatorStateChangedEvent], None],
    ) -> None:
        self._state_listeners.add(listener)

    def remove_policy_evaluator_state_changed_listener(
        self,
        listener: Callable[[PolicyEvaluatorStateChangedEvent], None],
    ) -> None:
        self._state_listeners.remove(listener)

    def add_policy_load_error_listener(self, listener: Callable[[PolicyLoadErrorEvent], None]) -> None:
        self._load_error_listeners.add(listener)

    def remove_policy_load_error_listener(self, listener: Callable[[PolicyLoadErrorEvent], None]) -> None:
        self._load_error_listeners.remove(listener)

    # ----------------------------
    # Binding
    # ----------------------------
    def set_pending_checkin(self, pending_checkin: Optional["PendingCheckin"]) -> None:
        """Bind to pending_checkin (None unbinds). Resets the state."""
        self._ensure_open()
        with self._lock:
            if self._pending_checkin is not None:
                self._unhook(self._pending_checkin)
            self._pending_checkin = pending_checkin
            if pending_checkin is not None:
                self._hook(pending_checkin)
        self._on_pending_checkin_changed(None)

    def get_pending_checkin(self) -> Optional["PendingCheckin"]:
        with self._lock:
            return self._pending_checkin

    # ----------------------------
    # Evaluation
    # ----------------------------
    def evaluate(self, context: PolicyContext) -> tuple[PolicyFailure, ...]:
        """
        Evaluate all policies, loading them first if needed.

        Raises:
            PolicyEvaluationCancelledError: if context's token was cancelled.
            PolicyEvaluationError: if the policy framework failed.
            TransportError: if policy definitions could not be queried.
        """
        check_not_none(context, "context")
        self._ensure_open()

        failures: tuple[PolicyFailure, ...] = ()
        framework_error: Optional[BaseException] = None

        try:
            with self._lock:
                try:
                    if self._state in _RELOAD_STATES:
                        try:
                            self._load_policies(context)
                        except TransportError:
                            raise
                        except Exception as exc:
                            framework_error = exc

                    preserve_load_error = self._state == PolicyEvaluatorState.POLICIES_LOAD_ERROR

                    if not self._statuses:
                        if not preserve_load_error:
                            self._state = PolicyEvaluatorState.EVALUATED
                    else:
                        for status in self._statuses:
                            context.cancellation_token.raise_if_cancelled()
                            status.failures = tuple(status.policy.evaluate(context))
                            if not preserve_load_error:
                                self._state = PolicyEvaluatorState.EVALUATED
                        failures = self.get_failures()
                except PolicyEvaluationCancelledError:
                    self._state = PolicyEvaluatorState.CANCELLED
                    raise
                except TransportError:
                    self._state = PolicyEvaluatorState.POLICIES_LOAD_ERROR
                    raise
                except Exception as exc:
                    logger.exception("Unhandled policy evaluation exception")
                    self._state = PolicyEvaluatorState.POLICIES_LOAD_ERROR
                    failures = ()
                    framework_error = exc
        finally:
            if framework_error is not None:
                self._load_error_listeners.fire(PolicyLoadErrorEvent(framework_error))
            for failure in failures:
                if isinstance(failure.policy, LoadErrorPolicy):
                    self._load_error_listeners.fire(
                        PolicyLoadErrorEvent(
                            PolicyLoadError(failure.message, details={"type_id": failure.policy.type_id})
                        )
                    )
            self._state_listeners.fire(PolicyEvaluatorStateChangedEvent(self.get_policy_evaluator_state()))

        if framework_error is not None:
            raise PolicyEvaluationError(
                f"Error in the check-in policy framework: {framework_error}",
                cause=framework_error,
            ) from framework_error

        return failures

    def reload_and_evaluate(self, context: PolicyContext) -> tuple[PolicyFailure, ...]:
        """Reload definitions from the server, then evaluate."""
        check_not_none(context, "context")
        with self._lock:
            self._state = PolicyEvaluatorState.UNEVALUATED
        return self.evaluate(context)

    def get_policy_evaluator_state(self) -> PolicyEvaluatorState:
        with self._lock:
            return self._state

    def get_policy_count(self) -> int:
        with self._lock:
            return len(self._statuses)

    def get_policies(self) -> list[CheckinPolicy]:
        with self._lock:
            return [s.policy for s in self._statuses]

    def get_failures(self) -> tuple[PolicyFailure, ...]:
        with self._lock:
            return tuple(f for s in self._statuses for f in s.failures)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._pending_checkin is not None:
                self._unhook(self._pending_checkin)
                self._pending_checkin = None
            statuses, self._statuses = self._statuses, []
        _close_statuses(statuses)

    def __enter__(self) -> "PolicyEvaluator":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    # ----------------------------
    # Internal
    # ----------------------------
    def _load_policies(self, context: PolicyContext) -> None:
        """Lock must be held."""
        old = self._statuses
        self._statuses = []
        self._state = PolicyEvaluatorState.UNEVALUATED

        pc = self._pending_checkin
        if pc is None:
            _close_statuses(old)
            return

        new: list[_PolicyStatus] = []
        try:
            scope_paths = pc.pending_changes.get_affected_scope_paths()
            if scope_paths:
                definitions = self._definition_source.get_checkin_policies_for_server_paths(scope_paths)
                for definition in definitions:
                    if not definition.enabled:
                        continue
                    new.append(self._status_for(definition, old))

                new.sort(key=lambda s: s.priority)

                for i, status in enumerate(new):
                    try:
                        status.policy.initialize(pc, context)
                    except Exception as exc:
                        logger.warning("Exception initializing check-in policy %s", status.policy.type_id, exc_info=True)
                        self._state = PolicyEvaluatorState.POLICIES_LOAD_ERROR
                        new[i] = _PolicyStatus(
                            LoadErrorPolicy(
                                f"Error initializing check-in policy {status.policy.type_id}: {exc}",
                                PolicyDefinition(type_id=status.policy.type_id, name=status.policy.name),
                            ),
                            status.priority,
                        )
                        status.policy.close()
        except Exception:
            logger.error("Generic error loading policies", exc_info=True)
            self._state = PolicyEvaluatorState.POLICIES_LOAD_ERROR
            _close_statuses(new)
            raise
        finally:
            _close_statuses(old)

        self._statuses = new
        if self._state == PolicyEvaluatorState.UNEVALUATED and not new:
            self._state = PolicyEvaluatorState.EVALUATED

    def _status_for(self, definition: PolicyDefinition, old: list[_PolicyStatus]) -> _PolicyStatus:
        """Reuse a previously loaded policy of the same type, or load one. Lock must be held."""
        for i, status in enumerate(old):
            if not isinstance(status.policy, LoadErrorPolicy) and status.policy.type_id == definition.type_id:
                del old[i]
                status.priority = definition.priority
                status.policy.load_configuration(definition.configuration)
                return status

        policy: CheckinPolicy
        try:
            loaded = self._loader.load(definition.type_id)
        except PolicyLoadError as exc:
            logger.warning("Exception loading check-in policy %s", definition.type_id, exc_info=True)
            self._state = PolicyEvaluatorState.POLICIES_LOAD_ERROR
            policy = LoadErrorPolicy(
                f"Error loading check-in policy {definition.type_id}: {exc}",
                definition,
            )
        else:
            if loaded is None:
                logger.warning("Could not load implementation for check-in policy %s", definition.type_id)
                self._state = PolicyEvaluatorState.POLICIES_LOAD_ERROR
                policy = LoadErrorPolicy(
                    f"No implementation found for check-in policy {definition.type_id}",
                    definition,
                )
            else:
                policy = loaded

        policy.load_configuration(definition.configuration)
        return _PolicyStatus(policy, definition.priority)

    def _hook(self, pc: "PendingCheckin") -> None:
        pc.pending_changes.add_checked_pending_changes_changed_listener(self._on_pending_checkin_changed)
        pc.pending_changes.add_affected_scopes_changed_listener(self._on_pending_checkin_changed)
        pc.pending_changes.add_comment_changed_listener(self._on_pending_checkin_changed)
        pc.notes.add_checkin_notes_changed_listener(self._on_pending_checkin_changed)
        pc.work_items.add_checked_work_items_changed_listener(self._on_pending_checkin_changed)

    def _unhook(self, pc: "PendingCheckin") -> None:
        pc.pending_changes.remove_checked_pending_changes_changed_listener(self._on_pending_checkin_changed)
        pc.pending_changes.remove_affected_scopes_changed_listener(self._on_pending_checkin_changed)
        pc.pending_changes.remove_comment_changed_listener(self._on_pending_checkin_changed)
        pc.notes.remove_checkin_notes_changed_listener(self._on_pending_checkin_changed)
        pc.work_items.remove_checked_work_items_changed_listener(self._on_pending_checkin_changed)

    def _on_pending_checkin_changed(self, event: Any) -> None:
        with self._lock:
            self._state = PolicyEvaluatorState.UNEVALUATED
        self._state_listeners.fire(PolicyEvaluatorStateChangedEvent(PolicyEvaluatorState.UNEVALUATED))

    def _ensure_open(self) -> None:
        if self._closed:
            raise InvalidStateError("PolicyEvaluator is closed")


def _close_statuses(statuses: list[_PolicyStatus]) -> None:
    for status in statuses:
        try:
            status.policy.close()
        except Exception:
            logger.warning("Exception closing check-in policy %s", status.policy.type_id, exc_info=True)
