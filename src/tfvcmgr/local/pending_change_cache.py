"""In-memory, thread-safe index of the workspace's pending changes."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, replace
from typing import Callable, Optional

from tfvcmgr.models import ChangeType, ItemType, PendingChange
from tfvcmgr.util import ListenerList
from tfvcmgr.util import server_path as sp

from .validators import check_not_empty, check_not_none

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PendingChangeCacheChangedEvent:
    added: tuple[PendingChange, ...] = ()
    removed: tuple[PendingChange, ...] = ()
    cleared: bool = False


class PendingChangeCollection:
    """
    Pending changes indexed four ways.

    Indexes (all guarded by one lock):
        - by server path
        - by every server path in the change's hierarchy (itself included)
        - by local path
        - by every local path in the change's local hierarchy

    Server paths compare case-insensitively; local paths follow the
    platform (os.path.normcase).
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_server_path: dict[str, PendingChange] = {}
        self._by_parent_server_path: dict[str, set[PendingChange]] = {}
        self._by_local_path: dict[str, PendingChange] = {}
        self._by_parent_local_path: dict[str, set[PendingChange]] = {}
        self._listeners: ListenerList[PendingChangeCacheChangedEvent] = ListenerList()

    # ----------------------------
    # Listeners
    # ----------------------------
    def add_listener(self, listener: Callable[[PendingChangeCacheChangedEvent], None]) -> None:
        self._listeners.add(listener)

    def remove_listener(self, listener: Callable[[PendingChangeCacheChangedEvent], None]) -> None:
        self._listeners.remove(listener)

    # ----------------------------
    # Mutation
    # ----------------------------
    def clear(self) -> None:
        with self._lock:
            self._by_server_path.clear()
            self._by_parent_server_path.clear()
            self._by_local_path.clear()
            self._by_parent_local_path.clear()
        self._listeners.fire(PendingChangeCacheChangedEvent(cleared=True))

    def add(self, change: PendingChange, for_refill: bool = False) -> Optional[PendingChange]:
        """
        Add change, replacing any change at the same server path.

        With for_refill=True no lookup for an existing change is made (use
        when filling an empty collection).

        Returns:
            The replaced change, or None.
        """
        check_not_none(change, "change")
        check_not_empty(change.server_item, "change.server_item")

        with self._lock:
            old = None if for_refill else self._remove_locked(change)
            self._add_internal(change)

        self._listeners.fire(
            PendingChangeCacheChangedEvent(
                added=(change,),
                removed=(old,) if old is not None else (),
            )
        )
        return old

    def remove(self, change: PendingChange) -> Optional[PendingChange]:
        """
        Remove the change at change.server_item (or, for renames, at
        change.source_server_item). Returns the removed change, or None.
        """
        check_not_none(change, "change")
        check_not_empty(change.server_item, "change.server_item")

        with self._lock:
            removed = self._remove_locked(change)

        if removed is not None:
            self._listeners.fire(PendingChangeCacheChangedEvent(removed=(removed,)))
        return removed

    # ----------------------------
    # Queries
    # ----------------------------
    def get_values(self) -> list[PendingChange]:
        with self._lock:
            return list(self._by_server_path.values())

    def size(self) -> int:
        with self._lock:
            return len(self._by_server_path)

    def __len__(self) -> int:
        return self.size()

    def get_pending_change_by_server_path(self, server_path: str) -> Optional[PendingChange]:
        with self._lock:
            return self._by_server_path.get(sp.key(server_path))

    def get_pending_changes_by_server_path_recursive(self, server_path: str) -> list[PendingChange]:
        with self._lock:
            return list(self._by_parent_server_path.get(sp.key(server_path), ()))

    def get_pending_change_by_local_path(self, local_path: str) -> Optional[PendingChange]:
        with self._lock:
            return self._by_local_path.get(_local_key(local_path))

    def get_pending_changes_by_local_path_recursive(self, local_path: str) -> list[PendingChange]:
        with self._lock:
            return list(self._by_parent_local_path.get(_local_key(local_path), ()))

    def has_pending_changes_by_local_path_recursive(self, local_path: str) -> bool:
        with self._lock:
            return _local_key(local_path) in self._by_parent_local_path

    # ----------------------------
    # Internal (lock held)
    # ----------------------------
    def _add_internal(self, change: PendingChange) -> None:
        server_key = sp.key(change.server_item)
        self._by_server_path[server_key] = change
        for path in sp.get_hierarchy(change.server_item):
            self._by_parent_server_path.setdefault(path.casefold(), set()).add(change)

        if change.local_item is not None:
            local_key = _local_key(change.local_item)
            self._by_local_path[local_key] = change
            for path in _local_hierarchy(local_key):
                self._by_parent_local_path.setdefault(path, set()).add(change)

    def _remove_locked(self, change: PendingChange) -> Optional[PendingChange]:
        removed = self._remove_internal(change)

        # children of an undone folder rename move back under the source path
        if (
            removed is not None
            and removed.change_type.contains(ChangeType.RENAME)
            and removed.item_type == ItemType.FOLDER
        ):
            self._retarget_children_of_undone_rename(removed)

        return removed

    def _remove_internal(self, change: PendingChange) -> Optional[PendingChange]:
        server_key = sp.key(change.server_item)
        removed = self._by_server_path.pop(server_key, None)

        if removed is None and change.source_server_item is not None:
            server_key = sp.key(change.source_server_item)
            removed = self._by_server_path.pop(server_key, None)

        if removed is None:
            return None

        for path in sp.get_hierarchy(removed.server_item):
            _discard(self._by_parent_server_path, path.casefold(), removed)

        if removed.local_item is not None:
            local_key = _local_key(removed.local_item)
            self._by_local_path.pop(local_key, None)
            for path in _local_hierarchy(local_key):
                _discard(self._by_parent_local_path, path, removed)

        return removed

    def _retarget_children_of_undone_rename(self, parent: PendingChange) -> None:
        children = [
            c
            for c in self._by_parent_server_path.get(sp.key(parent.server_item), ())
            if c is not parent
        ]
        if not children:
            return

        old_server = parent.server_item
        new_server = parent.source_server_item
        old_local = parent.local_item
        new_local = parent.source_local_item

        if new_server is None or old_local is None or new_local is None:
            logger.warning("Could not retarget children of undone rename pending change for %s", old_server)
            return

        for child in children:
            new_child = replace(
                child,
                server_item=sp.combine(new_server, sp.make_relative(child.server_item, old_server)),
                local_item=(
                    os.path.join(new_local, os.path.relpath(child.local_item, old_local))
                    if child.local_item is not None
                    else None
                ),
            )
            self._remove_internal(child)
            self._add_internal(new_child)


def _local_key(local_path: str) -> str:
    check_not_empty(local_path, "local_path")
    return os.path.normcase(os.path.normpath(local_path))


def _local_hierarchy(local_key: str) -> list[str]:
    """All ancestors of local_key (outermost first), local_key included."""
    chain: list[str] = []
    cur = local_key
    while True:
        chain.append(cur)
        parent = os.path.dirname(cur)
        if not parent or parent == cur:
            break
        cur = parent
    chain.reverse()
    return chain


def _discard(index: dict[str, set[PendingChange]], key: str, change: PendingChange) -> None:
    bucket = index.get(key)
    if bucket is None:
        return
    bucket.discard(change)
    if not bucket:
        del index[key]
