"""Pre-checkin evaluation: notes, policies, conflicts."""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from tfvcmgr.controller.protocols import CheckinNoteDefinitionSource, ConflictDetector
from tfvcmgr.errors import PolicyEvaluationCancelledError, PolicyEvaluationError
from tfvcmgr.local.validators import check_not_none
from tfvcmgr.models import (
    CheckinConflict,
    CheckinEvaluationResult,
    CheckinNoteFailure,
    CheckinNoteFieldDefinition,
    EvaluationCanceled,
    PolicyEvaluatorState,
    PolicyFailure,
)
from tfvcmgr.policy.context import PolicyContext

from .aggregate import PendingCheckin
from .options import CheckinEvaluationOptions

logger = logging.getLogger(__name__)

EvaluationOutcome = Union[CheckinEvaluationResult, EvaluationCanceled]


class CheckinEvaluationPipeline:
    """
    Validates a candidate checkin before it is submitted.

    Stages run in order NOTES, POLICIES, CONFLICTS; each only when selected
    by the options. Failures found are returned as values. Transport and
    programming errors propagate.

    The policy evaluator is bound to the pending checkin being evaluated
    before it runs.

    The context's cancellation token is checked before every stage; a
    cancelled token (or a cancelled policy evaluator) yields
    EvaluationCanceled instead of a result.
    """

    def __init__(
        self,
        note_definitions: CheckinNoteDefinitionSource,
        conflict_detector: ConflictDetector,
    ) -> None:
        check_not_none(note_definitions, "note_definitions")
        check_not_none(conflict_detector, "conflict_detector")
        self._note_definitions = note_definitions
        self._conflict_detector = conflict_detector

    def evaluate(
        self,
        pending_checkin: PendingCheckin,
        options: CheckinEvaluationOptions,
        context: Optional[PolicyContext] = None,
        *,
        reload_policies: bool = False,
    ) -> EvaluationOutcome:
        check_not_none(pending_checkin, "pending_checkin")
        check_not_none(options, "options")
        if context is None:
            context = PolicyContext()

        checked = pending_checkin.pending_changes.get_checked_pending_changes()
        if not checked:
            return CheckinEvaluationResult()

        token = context.cancellation_token

        note_failures: tuple[CheckinNoteFailure, ...] = ()
        if options.contains(CheckinEvaluationOptions.NOTES):
            if token.is_cancelled():
                return EvaluationCanceled(stage="notes")
            note_failures = self._evaluate_notes(pending_checkin)

        policy_failures: tuple[PolicyFailure, ...] = ()
        policy_state: Optional[PolicyEvaluatorState] = None
        policy_exception: Optional[BaseException] = None
        if options.contains(CheckinEvaluationOptions.POLICIES):
            if token.is_cancelled():
                return EvaluationCanceled(stage="policies")
            evaluator = pending_checkin.policies.get_policy_evaluator()
            if evaluator is not None:
                if evaluator.get_pending_checkin() is not pending_checkin:
                    evaluator.set_pending_checkin(pending_checkin)
                try:
                    if reload_policies:
                        failures = evaluator.reload_and_evaluate(context)
                    else:
                        failures = evaluator.evaluate(context)
                    policy_failures = tuple(failures)
                except PolicyEvaluationCancelledError:
                    logger.info("Policy evaluation was cancelled")
                    return EvaluationCanceled(stage="policies")
                except PolicyEvaluationError as exc:
                    logger.warning("Check-in policy framework failed: %s", exc)
                    policy_exception = exc
                policy_state = evaluator.get_policy_evaluator_state()

        conflicts: tuple[CheckinConflict, ...] = ()
        if options.contains(CheckinEvaluationOptions.CONFLICTS):
            if token.is_cancelled():
                return EvaluationCanceled(stage="conflicts")
            conflicts = tuple(self._conflict_detector.detect_conflicts(checked))

        return CheckinEvaluationResult(
            conflicts=conflicts,
            note_failures=note_failures,
            policy_failures=policy_failures,
            policy_evaluator_state=policy_state,
            policy_evaluation_exception=policy_exception,
        )

    def _evaluate_notes(self, pending_checkin: PendingCheckin) -> tuple[CheckinNoteFailure, ...]:
        definitions = pending_checkin.notes.get_field_definitions()
        if definitions is None:
            scope_paths = pending_checkin.pending_changes.get_affected_scope_paths()
            definitions = _sorted_unique(
                self._note_definitions.query_checkin_note_field_definitions(scope_paths)
            )
            pending_checkin.notes.set_field_definitions(definitions)

        notes = pending_checkin.notes.get_checkin_notes()

        failures: list[CheckinNoteFailure] = []
        seen: set[str] = set()
        for definition in definitions:
            if not definition.required:
                continue
            name_key = definition.name.strip().casefold()
            if name_key in seen:
                continue

            value = notes.get_value(definition.name)
            if value is None or not value.strip():
                seen.add(name_key)
                failures.append(
                    CheckinNoteFailure(
                        definition,
                        f"The check-in note '{definition.name.strip()}' is required",
                    )
                )
        return tuple(failures)


def _sorted_unique(
    definitions: Sequence[CheckinNoteFieldDefinition],
) -> tuple[CheckinNoteFieldDefinition, ...]:
    """One definition per field name, ordered by display order then name."""
    unique: dict[str, CheckinNoteFieldDefinition] = {}
    for d in definitions:
        k = d.name.strip().casefold()
        existing = unique.get(k)
        # a required definition anywhere makes the field required
        if existing is None or (d.required and not existing.required):
            unique[k] = d
    return tuple(sorted(unique.values(), key=lambda d: (d.display_order, d.name.strip().casefold())))
