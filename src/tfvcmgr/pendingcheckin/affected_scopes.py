"""Tracks the team projects a set of pending changes touches."""

from __future__ import annotations

import functools
import threading
from typing import Iterable

from tfvcmgr.models import PendingChange
from tfvcmgr.util import server_path as sp


class AffectedScopeTracker:
    """
    Holds the ordered, unique scope root paths ("$/Project") of the last
    change list it was given.

    The snapshot is a tuple swapped atomically; readers never see a partial
    set.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._scope_paths: tuple[str, ...] = ()

    def set(self, changes: Iterable[PendingChange]) -> bool:
        """Recompute from changes. Returns True if the scope set differs from before."""
        unique: dict[str, str] = {}
        for change in changes:
            project = sp.get_team_project(change.server_item)
            unique.setdefault(sp.key(project), project)

        new_paths = tuple(sorted(unique.values(), key=functools.cmp_to_key(sp.compare_top_down)))

        with self._lock:
            if _same(new_paths, self._scope_paths):
                return False
            self._scope_paths = new_paths
            return True

    def get_scope_paths(self) -> tuple[str, ...]:
        return self._scope_paths


def _same(a: tuple[str, ...], b: tuple[str, ...]) -> bool:
    return len(a) == len(b) and all(sp.equals(x, y) for x, y in zip(a, b))
