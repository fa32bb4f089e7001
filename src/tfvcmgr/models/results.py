"""Result models for checkin evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from .notes import CheckinNoteFailure

if TYPE_CHECKING:  # pragma: no cover
    from tfvcmgr.policy.definitions import CheckinPolicy


class PolicyEvaluatorState(str, Enum):
    UNEVALUATED = "unevaluated"
    EVALUATED = "evaluated"
    POLICIES_LOAD_ERROR = "policies_load_error"
    CANCELLED = "cancelled"


@dataclass(slots=True, frozen=True)
class CheckinConflict:
    """A conflict the server would report for a checked change."""

    server_item: str
    code: str
    message: str
    resolvable: bool = False


@dataclass(slots=True, frozen=True)
class PolicyFailure:
    """
    A failure reported by one check-in policy.

    policy is the instance that reported it (None for framework failures).
    """

    message: str
    policy: Optional["CheckinPolicy"] = None


@dataclass(slots=True, frozen=True, eq=False)
class CheckinEvaluationResult:
    """
    Aggregate outcome of evaluating a candidate checkin.

    Notes:
        - Sequences are never None; empty means nothing was found.
        - policy_evaluator_state is None when policies were not evaluated.
        - policy_evaluation_exception holds a PolicyEvaluationError reported
          by the evaluator, if any. Results compare it by type and message,
          so re-evaluating unchanged inputs gives an equal result.
    """

    conflicts: tuple[CheckinConflict, ...] = ()
    note_failures: tuple[CheckinNoteFailure, ...] = ()
    policy_failures: tuple[PolicyFailure, ...] = ()
    policy_evaluator_state: Optional[PolicyEvaluatorState] = None
    policy_evaluation_exception: Optional[BaseException] = None

    def _key(self) -> tuple[Any, ...]:
        exc = self.policy_evaluation_exception
        return (
            self.conflicts,
            self.note_failures,
            self.policy_failures,
            self.policy_evaluator_state,
            None if exc is None else (type(exc), str(exc)),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CheckinEvaluationResult):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    @property
    def has_failures(self) -> bool:
        return bool(
            self.conflicts
            or self.note_failures
            or self.policy_failures
            or self.policy_evaluation_exception is not None
        )

    def to_summary(self) -> dict[str, Any]:
        return {
            "conflicts": len(self.conflicts),
            "note_failures": len(self.note_failures),
            "policy_failures": len(self.policy_failures),
            "policy_evaluator_state": (
                self.policy_evaluator_state.value
                if self.policy_evaluator_state is not None
                else None
            ),
        }


@dataclass(slots=True, frozen=True)
class EvaluationCanceled:
    """Returned instead of a result when the user cancelled evaluation."""

    stage: str
    message: str = "Checkin evaluation was cancelled"
