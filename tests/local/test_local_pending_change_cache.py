import os
import unittest

from tfvcmgr.errors import PreconditionError
from tfvcmgr.local import PendingChangeCacheChangedEvent, PendingChangeCollection
from tfvcmgr.models import ChangeType, ItemType, PendingChange


def _local(*parts: str) -> str:
    return os.path.join(os.path.abspath(os.sep), "work", *parts)


class TestPendingChangeCollection(unittest.TestCase):
    def setUp(self) -> None:
        self.collection = PendingChangeCollection()
        self.edit_a = PendingChange(
            server_item="$/Proj/src/a.txt",
            change_type=ChangeType.EDIT,
            local_item=_local("src", "a.txt"),
        )
        self.add_b = PendingChange(
            server_item="$/Proj/docs/b.md",
            change_type=ChangeType.ADD,
            local_item=_local("docs", "b.md"),
        )

    def test_add_and_lookup(self) -> None:
        self.assertIsNone(self.collection.add(self.edit_a))
        self.collection.add(self.add_b)

        self.assertEqual(self.collection.size(), 2)
        self.assertEqual(len(self.collection), 2)
        self.assertIs(self.collection.get_pending_change_by_server_path("$/proj/SRC/a.txt"), self.edit_a)
        self.assertIs(self.collection.get_pending_change_by_local_path(_local("docs", "b.md")), self.add_b)

    def test_recursive_server_queries_include_path_itself(self) -> None:
        self.collection.add(self.edit_a)
        self.collection.add(self.add_b)

        self.assertEqual(set(self.collection.get_pending_changes_by_server_path_recursive("$/Proj")), {self.edit_a, self.add_b})
        self.assertEqual(self.collection.get_pending_changes_by_server_path_recursive("$/Proj/src"), [self.edit_a])
        self.assertEqual(self.collection.get_pending_changes_by_server_path_recursive("$/Proj/src/a.txt"), [self.edit_a])
        self.assertEqual(set(self.collection.get_pending_changes_by_server_path_recursive("$/")), {self.edit_a, self.add_b})
        self.assertEqual(self.collection.get_pending_changes_by_server_path_recursive("$/Other"), [])

    def test_recursive_local_queries(self) -> None:
        self.collection.add(self.edit_a)

        self.assertTrue(self.collection.has_pending_changes_by_local_path_recursive(_local()))
        self.assertTrue(self.collection.has_pending_changes_by_local_path_recursive(_local("src")))
        self.assertFalse(self.collection.has_pending_changes_by_local_path_recursive(_local("docs")))
        self.assertEqual(self.collection.get_pending_changes_by_local_path_recursive(_local("src")), [self.edit_a])

    def test_add_replaces_change_at_same_server_path(self) -> None:
        self.collection.add(self.edit_a)
        lock_a = PendingChange(
            server_item="$/Proj/src/a.txt",
            change_type=ChangeType.EDIT | ChangeType.LOCK,
            local_item=_local("src", "a.txt"),
        )

        old = self.collection.add(lock_a)

        self.assertIs(old, self.edit_a)
        self.assertEqual(self.collection.get_values(), [lock_a])
        self.assertEqual(self.collection.get_pending_changes_by_server_path_recursive("$/Proj"), [lock_a])

    def test_add_for_refill_skips_lookup(self) -> None:
        self.assertIsNone(self.collection.add(self.edit_a, for_refill=True))
        self.assertEqual(self.collection.size(), 1)

    def test_remove_cleans_every_index(self) -> None:
        self.collection.add(self.edit_a)

        removed = self.collection.remove(self.edit_a)

        self.assertIs(removed, self.edit_a)
        self.assertEqual(self.collection.size(), 0)
        self.assertEqual(self.collection.get_pending_changes_by_server_path_recursive("$/Proj"), [])
        self.assertFalse(self.collection.has_pending_changes_by_local_path_recursive(_local()))
        self.assertIsNone(self.collection.get_pending_change_by_local_path(_local("src", "a.txt")))
        self.assertIsNone(self.collection.remove(self.edit_a))

    def test_remove_falls_back_to_source_server_item(self) -> None:
        self.collection.add(PendingChange(server_item="$/Proj/old.txt", change_type=ChangeType.EDIT))
        rename = PendingChange(
            server_item="$/Proj/new.txt",
            change_type=ChangeType.RENAME,
            source_server_item="$/Proj/old.txt",
        )

        removed = self.collection.remove(rename)

        self.assertIsNotNone(removed)
        self.assertEqual(removed.server_item, "$/Proj/old.txt")
        self.assertEqual(self.collection.size(), 0)

    def test_undoing_folder_rename_retargets_children(self) -> None:
        folder_rename = PendingChange(
            server_item="$/Proj/renamed",
            change_type=ChangeType.RENAME,
            item_type=ItemType.FOLDER,
            local_item=_local("renamed"),
            source_server_item="$/Proj/orig",
            source_local_item=_local("orig"),
        )
        child_edit = PendingChange(
            server_item="$/Proj/renamed/x.txt",
            change_type=ChangeType.EDIT,
            local_item=_local("renamed", "x.txt"),
        )
        self.collection.add(folder_rename)
        self.collection.add(child_edit)

        self.collection.remove(folder_rename)

        values = self.collection.get_values()
        self.assertEqual(len(values), 1)
        self.assertEqual(values[0].server_item, "$/Proj/orig/x.txt")
        self.assertEqual(os.path.normcase(values[0].local_item), os.path.normcase(_local("orig", "x.txt")))
        self.assertIsNone(self.collection.get_pending_change_by_server_path("$/Proj/renamed/x.txt"))

    def test_clear(self) -> None:
        self.collection.add(self.edit_a)
        self.collection.clear()
        self.assertEqual(self.collection.get_values(), [])
        self.assertFalse(self.collection.has_pending_changes_by_local_path_recursive(_local()))

    def test_listeners(self) -> None:
        events: list[PendingChangeCacheChangedEvent] = []
        self.collection.add_listener(events.append)

        self.collection.add(self.edit_a)
        self.collection.remove(self.edit_a)
        self.collection.remove(self.edit_a)
        self.collection.clear()

        self.assertEqual(
            events,
            [
                PendingChangeCacheChangedEvent(added=(self.edit_a,)),
                PendingChangeCacheChangedEvent(removed=(self.edit_a,)),
                PendingChangeCacheChangedEvent(cleared=True),
            ],
        )

        self.collection.remove_listener(events.append)
        self.collection.add(self.add_b)
        self.assertEqual(len(events), 3)

    def test_preconditions(self) -> None:
        with self.assertRaises(PreconditionError):
            self.collection.add(None)  # type: ignore[arg-type]
        with self.assertRaises(PreconditionError):
            self.collection.add(PendingChange(server_item="", change_type=ChangeType.ADD))


if __name__ == "__main__":
    unittest.main()
