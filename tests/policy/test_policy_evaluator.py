import unittest
from typing import Optional, Sequence

from tfvcmgr.errors import (
    InvalidStateError,
    NetworkError,
    PolicyEvaluationCancelledError,
    PolicyEvaluationError,
    PolicyLoadError,
    PreconditionError,
)
from tfvcmgr.models import ChangeType, PendingChange, PolicyEvaluatorState, PolicyFailure
from tfvcmgr.pendingcheckin import PendingCheckin
from tfvcmgr.policy import (
    CancellationToken,
    CheckinPolicy,
    CommentRequiredPolicy,
    LoadErrorPolicy,
    MappingPolicyLoader,
    PolicyContext,
    PolicyDefinition,
    PolicyEvaluator,
    PolicyEvaluatorStateChangedEvent,
    PolicyLoadErrorEvent,
)


class FakeDefinitionSource:
    def __init__(self, definitions: Sequence[PolicyDefinition] = (), error: Optional[Exception] = None) -> None:
        self.definitions = list(definitions)
        self.error = error
        self.calls: list[tuple[str, ...]] = []

    def get_checkin_policies_for_server_paths(self, server_paths: Sequence[str]) -> Sequence[PolicyDefinition]:
        self.calls.append(tuple(server_paths))
        if self.error is not None:
            raise self.error
        return list(self.definitions)


class RecordingPolicy(CheckinPolicy):
    type_id = "test.Recording"
    name = "Recording"

    def __init__(self, failures: Sequence[str] = (), order: Optional[list[str]] = None) -> None:
        super().__init__()
        self.failures = list(failures)
        self.order = order
        self.evaluations = 0
        self.closed = False

    def evaluate(self, context: PolicyContext) -> Sequence[PolicyFailure]:
        self.evaluations += 1
        if self.order is not None:
            self.order.append(self.type_id)
        return tuple(PolicyFailure(m, self) for m in self.failures)

    def close(self) -> None:
        self.closed = True
        super().close()


class BrokenPolicy(CheckinPolicy):
    type_id = "test.Broken"

    def evaluate(self, context: PolicyContext) -> Sequence[PolicyFailure]:
        raise RuntimeError("policy bug")


class BadInitPolicy(CheckinPolicy):
    type_id = "test.BadInit"

    def initialize(self, pending_checkin, context) -> None:
        raise RuntimeError("cannot initialize")

    def evaluate(self, context: PolicyContext) -> Sequence[PolicyFailure]:
        return ()


def _checkin(comment: str = "") -> PendingCheckin:
    return PendingCheckin(
        [PendingChange(server_item="$/Proj/a.txt", change_type=ChangeType.EDIT)],
        comment=comment,
    )


class TestPolicyEvaluator(unittest.TestCase):
    def setUp(self) -> None:
        self.state_events: list[PolicyEvaluatorStateChangedEvent] = []
        self.load_errors: list[PolicyLoadErrorEvent] = []

    def _evaluator(self, source: FakeDefinitionSource, factories: dict) -> PolicyEvaluator:
        evaluator = PolicyEvaluator(source, MappingPolicyLoader(factories))
        evaluator.add_policy_evaluator_state_changed_listener(self.state_events.append)
        evaluator.add_policy_load_error_listener(self.load_errors.append)
        return evaluator

    def test_unbound_evaluator_has_no_policies(self) -> None:
        source = FakeDefinitionSource()
        evaluator = self._evaluator(source, {})

        self.assertEqual(evaluator.get_policy_evaluator_state(), PolicyEvaluatorState.UNEVALUATED)
        self.assertEqual(evaluator.evaluate(PolicyContext()), ())
        self.assertEqual(evaluator.get_policy_evaluator_state(), PolicyEvaluatorState.EVALUATED)
        self.assertEqual(source.calls, [])

    def test_loads_enabled_definitions_for_affected_scopes(self) -> None:
        source = FakeDefinitionSource([
            PolicyDefinition(type_id=CommentRequiredPolicy.type_id),
            PolicyDefinition(type_id=RecordingPolicy.type_id, enabled=False),
        ])
        evaluator = self._evaluator(
            source,
            {CommentRequiredPolicy.type_id: CommentRequiredPolicy, RecordingPolicy.type_id: RecordingPolicy},
        )
        evaluator.set_pending_checkin(_checkin())

        failures = evaluator.evaluate(PolicyContext())

        self.assertEqual(source.calls, [("$/Proj",)])
        self.assertEqual(evaluator.get_policy_count(), 1)
        self.assertEqual(len(failures), 1)
        self.assertIsInstance(failures[0].policy, CommentRequiredPolicy)
        self.assertEqual(evaluator.get_policy_evaluator_state(), PolicyEvaluatorState.EVALUATED)
        self.assertEqual(evaluator.get_failures(), failures)

    def test_evaluated_state_does_not_reload(self) -> None:
        source = FakeDefinitionSource([PolicyDefinition(type_id=RecordingPolicy.type_id)])
        evaluator = self._evaluator(source, {RecordingPolicy.type_id: RecordingPolicy})
        evaluator.set_pending_checkin(_checkin())

        evaluator.evaluate(PolicyContext())
        evaluator.evaluate(PolicyContext())

        self.assertEqual(len(source.calls), 1)
        self.assertEqual(evaluator.get_policies()[0].evaluations, 2)

    def test_checkin_change_resets_state_and_reuses_policy(self) -> None:
        source = FakeDefinitionSource([PolicyDefinition(type_id=RecordingPolicy.type_id)])
        evaluator = self._evaluator(source, {RecordingPolicy.type_id: RecordingPolicy})
        pc = _checkin()
        evaluator.set_pending_checkin(pc)
        evaluator.evaluate(PolicyContext())
        first = evaluator.get_policies()[0]

        pc.pending_changes.set_comment("changed")

        self.assertEqual(evaluator.get_policy_evaluator_state(), PolicyEvaluatorState.UNEVALUATED)
        self.assertEqual(self.state_events[-1].state, PolicyEvaluatorState.UNEVALUATED)

        evaluator.evaluate(PolicyContext())
        self.assertEqual(len(source.calls), 2)
        self.assertIs(evaluator.get_policies()[0], first)
        self.assertFalse(first.closed)

    def test_reload_and_evaluate_requeries(self) -> None:
        source = FakeDefinitionSource([PolicyDefinition(type_id=RecordingPolicy.type_id)])
        evaluator = self._evaluator(source, {RecordingPolicy.type_id: RecordingPolicy})
        evaluator.set_pending_checkin(_checkin())

        evaluator.evaluate(PolicyContext())
        evaluator.reload_and_evaluate(PolicyContext())

        self.assertEqual(len(source.calls), 2)

    def test_policies_run_in_priority_order(self) -> None:
        order: list[str] = []

        class Second(RecordingPolicy):
            type_id = "test.Second"

        class First(RecordingPolicy):
            type_id = "test.First"

        source = FakeDefinitionSource([
            PolicyDefinition(type_id="test.Second", priority=5),
            PolicyDefinition(type_id="test.First", priority=1),
        ])
        evaluator = self._evaluator(
            source,
            {"test.Second": lambda: Second(order=order), "test.First": lambda: First(order=order)},
        )
        evaluator.set_pending_checkin(_checkin())

        evaluator.evaluate(PolicyContext())

        self.assertEqual(order, ["test.First", "test.Second"])

    def test_unknown_policy_type_becomes_load_error(self) -> None:
        source = FakeDefinitionSource([PolicyDefinition(type_id="missing.Policy", name="Missing")])
        evaluator = self._evaluator(source, {})
        evaluator.set_pending_checkin(_checkin())

        with self.assertLogs("tfvcmgr.policy.evaluator", level="WARNING"):
            failures = evaluator.evaluate(PolicyContext())

        self.assertEqual(len(failures), 1)
        self.assertIsInstance(failures[0].policy, LoadErrorPolicy)
        self.assertIn("missing.Policy", failures[0].message)
        self.assertEqual(evaluator.get_policy_evaluator_state(), PolicyEvaluatorState.POLICIES_LOAD_ERROR)
        self.assertEqual(len(self.load_errors), 1)
        self.assertIsInstance(self.load_errors[0].error, PolicyLoadError)

    def test_load_error_state_triggers_reload(self) -> None:
        source = FakeDefinitionSource([PolicyDefinition(type_id="missing.Policy")])
        evaluator = self._evaluator(source, {})
        evaluator.set_pending_checkin(_checkin())

        with self.assertLogs("tfvcmgr.policy.evaluator", level="WARNING"):
            evaluator.evaluate(PolicyContext())
            evaluator.evaluate(PolicyContext())

        self.assertEqual(len(source.calls), 2)

    def test_initialize_failure_becomes_load_error(self) -> None:
        source = FakeDefinitionSource([PolicyDefinition(type_id=BadInitPolicy.type_id)])
        evaluator = self._evaluator(source, {BadInitPolicy.type_id: BadInitPolicy})
        evaluator.set_pending_checkin(_checkin())

        with self.assertLogs("tfvcmgr.policy.evaluator", level="WARNING"):
            failures = evaluator.evaluate(PolicyContext())

        self.assertEqual(len(failures), 1)
        self.assertIn("cannot initialize", failures[0].message)
        self.assertEqual(evaluator.get_policy_evaluator_state(), PolicyEvaluatorState.POLICIES_LOAD_ERROR)

    def test_cancellation(self) -> None:
        source = FakeDefinitionSource([PolicyDefinition(type_id=RecordingPolicy.type_id)])
        evaluator = self._evaluator(source, {RecordingPolicy.type_id: RecordingPolicy})
        evaluator.set_pending_checkin(_checkin())
        token = CancellationToken()
        token.cancel()

        with self.assertRaises(PolicyEvaluationCancelledError):
            evaluator.evaluate(PolicyContext(token))

        self.assertEqual(evaluator.get_policy_evaluator_state(), PolicyEvaluatorState.CANCELLED)
        self.assertEqual(evaluator.get_policies()[0].evaluations, 0)
        self.assertEqual(self.state_events[-1].state, PolicyEvaluatorState.CANCELLED)

        evaluator.evaluate(PolicyContext())
        self.assertEqual(len(source.calls), 2)
        self.assertEqual(evaluator.get_policy_evaluator_state(), PolicyEvaluatorState.EVALUATED)

    def test_unhandled_policy_exception_is_framework_error(self) -> None:
        source = FakeDefinitionSource([PolicyDefinition(type_id=BrokenPolicy.type_id)])
        evaluator = self._evaluator(source, {BrokenPolicy.type_id: BrokenPolicy})
        evaluator.set_pending_checkin(_checkin())

        with self.assertLogs("tfvcmgr.policy.evaluator", level="ERROR"):
            with self.assertRaises(PolicyEvaluationError) as ctx:
                evaluator.evaluate(PolicyContext())

        self.assertIsInstance(ctx.exception.cause, RuntimeError)
        self.assertEqual(evaluator.get_policy_evaluator_state(), PolicyEvaluatorState.POLICIES_LOAD_ERROR)
        self.assertEqual(len(self.load_errors), 1)

    def test_transport_error_propagates(self) -> None:
        source = FakeDefinitionSource(error=NetworkError("down"))
        evaluator = self._evaluator(source, {})
        evaluator.set_pending_checkin(_checkin())

        with self.assertLogs("tfvcmgr.policy.evaluator", level="ERROR"):
            with self.assertRaises(NetworkError):
                evaluator.evaluate(PolicyContext())

        self.assertEqual(evaluator.get_policy_evaluator_state(), PolicyEvaluatorState.POLICIES_LOAD_ERROR)

    def test_close_unhooks_and_closes_policies(self) -> None:
        source = FakeDefinitionSource([PolicyDefinition(type_id=RecordingPolicy.type_id)])
        evaluator = self._evaluator(source, {RecordingPolicy.type_id: RecordingPolicy})
        pc = _checkin()
        evaluator.set_pending_checkin(pc)
        evaluator.evaluate(PolicyContext())
        policy = evaluator.get_policies()[0]
        events_before = len(self.state_events)

        evaluator.close()
        pc.pending_changes.set_comment("after close")

        self.assertTrue(policy.closed)
        self.assertEqual(len(self.state_events), events_before)
        with self.assertRaises(InvalidStateError):
            evaluator.evaluate(PolicyContext())
        evaluator.close()

    def test_rebinding_unhooks_previous_checkin(self) -> None:
        evaluator = self._evaluator(FakeDefinitionSource(), {})
        old, new = _checkin(), _checkin()
        evaluator.set_pending_checkin(old)
        evaluator.set_pending_checkin(new)
        evaluator.evaluate(PolicyContext())

        old.pending_changes.set_comment("x")

        self.assertEqual(evaluator.get_policy_evaluator_state(), PolicyEvaluatorState.EVALUATED)
        self.assertIs(evaluator.get_pending_checkin(), new)

    def test_preconditions(self) -> None:
        with self.assertRaises(PreconditionError):
            PolicyEvaluator(None, MappingPolicyLoader({}))  # type: ignore[arg-type]
        evaluator = PolicyEvaluator(FakeDefinitionSource(), MappingPolicyLoader({}))
        with self.assertRaises(PreconditionError):
            evaluator.evaluate(None)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
