import unittest

from tfvcmgr.models import CheckinWorkItemAction, WorkItemCheckinInfo


class TestWorkItems(unittest.TestCase):
    def test_defaults(self) -> None:
        info = WorkItemCheckinInfo(work_item_id=42)
        self.assertEqual(info.action, CheckinWorkItemAction.ASSOCIATE)
        self.assertEqual(info.title, "")

    def test_resolve(self) -> None:
        info = WorkItemCheckinInfo(work_item_id=7, title="Bug", action=CheckinWorkItemAction.RESOLVE)
        self.assertEqual(info.action.value, "resolve")
        self.assertEqual(info, WorkItemCheckinInfo(7, "Bug", CheckinWorkItemAction.RESOLVE))


if __name__ == "__main__":
    unittest.main()
