"""Client-side caches: the workspace item tree and pending changes."""

from __future__ import annotations

from .item_tree import ItemTreeCache
from .pending_change_cache import PendingChangeCacheChangedEvent, PendingChangeCollection

__all__ = [
    "ItemTreeCache",
    "PendingChangeCollection",
    "PendingChangeCacheChangedEvent",
]
