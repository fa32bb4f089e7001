import unittest

from tfvcmgr.errors import PolicyLoadError
from tfvcmgr.models import ChangeType, PendingChange
from tfvcmgr.pendingcheckin import PendingCheckin
from tfvcmgr.policy import (
    CheckinPolicy,
    CommentRequiredPolicy,
    DisallowedPathPolicy,
    LoadErrorPolicy,
    MappingPolicyLoader,
    PolicyContext,
    PolicyDefinition,
)


class TestMappingPolicyLoader(unittest.TestCase):
    def test_load_known_type(self) -> None:
        loader = MappingPolicyLoader({CommentRequiredPolicy.type_id: CommentRequiredPolicy})
        policy = loader.load(CommentRequiredPolicy.type_id)
        self.assertIsInstance(policy, CommentRequiredPolicy)
        self.assertIsNot(policy, loader.load(CommentRequiredPolicy.type_id))

    def test_unknown_type_is_none(self) -> None:
        self.assertIsNone(MappingPolicyLoader({}).load("nope"))

    def test_factory_failure_becomes_load_error(self) -> None:
        def broken() -> CheckinPolicy:
            raise RuntimeError("missing dependency")

        loader = MappingPolicyLoader({"t": broken})
        with self.assertRaises(PolicyLoadError) as ctx:
            loader.load("t")
        self.assertEqual(ctx.exception.details["type_id"], "t")
        self.assertIsInstance(ctx.exception.cause, RuntimeError)


class TestLoadErrorPolicy(unittest.TestCase):
    def test_always_fails_with_message(self) -> None:
        policy = LoadErrorPolicy("cannot load", PolicyDefinition(type_id="t1", name="Thing"))
        failures = policy.evaluate(PolicyContext())
        self.assertEqual(len(failures), 1)
        self.assertEqual(failures[0].message, "cannot load")
        self.assertIs(failures[0].policy, policy)
        self.assertEqual(policy.type_id, "t1")
        self.assertEqual(policy.name, "Thing")

    def test_equal_by_type_and_message(self) -> None:
        definition = PolicyDefinition(type_id="t1")
        first = LoadErrorPolicy("cannot load", definition)

        self.assertEqual(first, LoadErrorPolicy("cannot load", definition))
        self.assertEqual(hash(first), hash(LoadErrorPolicy("cannot load", definition)))
        self.assertNotEqual(first, LoadErrorPolicy("other", definition))
        self.assertNotEqual(first, LoadErrorPolicy("cannot load", PolicyDefinition(type_id="t2")))
        self.assertEqual(first.evaluate(PolicyContext()), LoadErrorPolicy("cannot load", definition).evaluate(PolicyContext()))


class TestBuiltinPolicies(unittest.TestCase):
    def _checkin(self, comment: str = "") -> PendingCheckin:
        changes = [
            PendingChange(server_item="$/Proj/src/a.txt", change_type=ChangeType.EDIT),
            PendingChange(server_item="$/Proj/secret/key.pem", change_type=ChangeType.ADD),
        ]
        return PendingCheckin(changes, comment=comment)

    def test_comment_required(self) -> None:
        policy = CommentRequiredPolicy()
        pc = self._checkin()
        policy.initialize(pc, PolicyContext())

        self.assertEqual(len(policy.evaluate(PolicyContext())), 1)

        pc.pending_changes.set_comment("fix")
        self.assertEqual(policy.evaluate(PolicyContext()), ())

    def test_uninitialized_policy_reports_nothing(self) -> None:
        self.assertEqual(CommentRequiredPolicy().evaluate(PolicyContext()), ())

    def test_disallowed_path(self) -> None:
        policy = DisallowedPathPolicy()
        policy.load_configuration({"disallowed": "SECRET"})
        policy.initialize(self._checkin(), PolicyContext())

        failures = policy.evaluate(PolicyContext())

        self.assertEqual(len(failures), 1)
        self.assertIn("$/Proj/secret/key.pem", failures[0].message)

    def test_disallowed_path_without_configuration(self) -> None:
        policy = DisallowedPathPolicy()
        policy.initialize(self._checkin(), PolicyContext())
        self.assertEqual(policy.evaluate(PolicyContext()), ())

    def test_close_releases_pending_checkin(self) -> None:
        policy = CommentRequiredPolicy()
        policy.initialize(self._checkin(), PolicyContext())
        policy.close()
        self.assertIsNone(policy.pending_checkin)


if __name__ == "__main__":
    unittest.main()
