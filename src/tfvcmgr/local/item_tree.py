"""
Lazily computed workspace item tree.

Children of a folder come from two places:
  - what the server reports (one level at a time), and
  - folders implied by pending changes below the folder that the server does
    not know yet (e.g. a pending add at "$/A/B/C/file.txt" implies "$/A/B").
"""

from __future__ import annotations

import logging
from typing import Optional

from tfvcmgr.controller.protocols import (
    DeletedState,
    GetItemsOptions,
    ItemQueryService,
    PendingChangeCache,
    RecursionType,
)
from tfvcmgr.errors import TransportError
from tfvcmgr.models import ChildrenState, FolderItem, Item, ItemType
from tfvcmgr.util import server_path as sp

from .validators import check_is_folder, check_not_empty, check_not_none

logger = logging.getLogger(__name__)


class ItemTreeCache:
    """
    Browse the workspace tree folder by folder.

    Notes:
        - Computation is serialized per folder (FolderItem.lock).
        - Reading an already cached folder takes no lock.
        - A map is only reused for the same include_deleted mode; switching
          modes recomputes, since a deleted occupant can hide a folder
          implied by pending changes.
    """

    def __init__(
        self,
        item_service: ItemQueryService,
        pending_changes: Optional[PendingChangeCache] = None,
    ) -> None:
        check_not_none(item_service, "item_service")
        self._item_service = item_service
        self._pending_changes = pending_changes

    # ----------------------------
    # Public API
    # ----------------------------
    def get_children(self, folder: FolderItem, include_deleted: bool = False) -> set[Item]:
        check_is_folder(folder)
        children = self._ensure_children(folder, include_deleted)
        if include_deleted:
            return set(children.values())
        return {item for item in children.values() if not item.is_deleted}

    def get_descendant_by_full_path(
        self,
        folder: FolderItem,
        path: str,
        include_deleted: bool = False,
    ) -> Optional[Item]:
        """
        Find the item at path somewhere below folder.

        Tries the direct child first, then descends through the next-level
        folder on the way to path (computing it lazily).
        """
        check_is_folder(folder)
        check_not_empty(path, "path")

        if not sp.is_strict_child(folder.server_path, path):
            return None

        children = self._ensure_children(folder, include_deleted)

        direct = children.get(sp.key(path))
        if direct is not None and _visible(direct, include_deleted):
            return direct

        remainder = sp.make_relative(path, folder.server_path)
        first = remainder.split(sp.SEPARATOR, 1)[0]
        if first == remainder:
            return None

        next_folder = children.get(sp.key(sp.combine(folder.server_path, first)))
        if not isinstance(next_folder, FolderItem) or not _visible(next_folder, include_deleted):
            return None

        return self.get_descendant_by_full_path(next_folder, path, include_deleted)

    def set_children_empty(self, folder: FolderItem) -> None:
        """Mark folder as known to have no children (no query will be made)."""
        check_is_folder(folder)
        with folder.lock:
            folder.children = {}
            folder.children_include_deleted = False
            folder.children_state = ChildrenState.EMPTY

    def clear_cached_children(self, folder: FolderItem) -> None:
        """Drop the cached children; the next access queries again."""
        check_is_folder(folder)
        with folder.lock:
            folder.children = {}
            folder.children_include_deleted = False
            folder.children_state = ChildrenState.UNCOMPUTED

    def add_child(self, folder: FolderItem, item: Item) -> bool:
        """
        Add (or dedup-merge) a single child.

        Returns False if item is the folder itself and was ignored.
        """
        check_is_folder(folder)
        check_not_none(item, "item")

        if item == folder:
            return False

        with folder.lock:
            if folder.children_state == ChildrenState.CACHED:
                new_children = dict(folder.children)
            else:
                new_children = {}
            _add_with_dedup(new_children, item)
            folder.children = new_children
            folder.children_state = ChildrenState.CACHED
        return True

    # ----------------------------
    # Internal
    # ----------------------------
    def _ensure_children(self, folder: FolderItem, include_deleted: bool) -> dict[str, Item]:
        if _is_usable(folder, include_deleted):
            return folder.children

        with folder.lock:
            if _is_usable(folder, include_deleted):
                return folder.children

            new_children = self._compute_children(folder, include_deleted)

            folder.children = new_children
            folder.children_include_deleted = include_deleted
            folder.children_state = ChildrenState.CACHED
            return new_children

    def _compute_children(self, folder: FolderItem, include_deleted: bool) -> dict[str, Item]:
        options = GetItemsOptions.INCLUDE_BRANCH_INFO
        if include_deleted:
            options |= GetItemsOptions.INCLUDE_SOURCE_RENAMES
        deleted_state = DeletedState.ANY if include_deleted else DeletedState.NON_DELETED

        logger.debug("Computing children of %s (include_deleted=%s)", folder.server_path, include_deleted)

        try:
            results = self._item_service.query_items_extended(
                [folder.server_path],
                ItemType.ANY,
                deleted_state,
                RecursionType.ONE_LEVEL,
                options,
            )
        except TransportError as exc:
            logger.warning("Could not query children of %s: %s", folder.server_path, exc)
            return {}

        new_children: dict[str, Item] = {}
        items = results[0] if results else []
        for item in items:
            if item == folder:
                continue
            _add_with_dedup(new_children, item)

        self._add_implicit_children(folder, new_children)
        return new_children

    def _add_implicit_children(self, folder: FolderItem, children: dict[str, Item]) -> None:
        if self._pending_changes is None:
            return

        changes = self._pending_changes.get_pending_changes_by_server_path_recursive(folder.server_path)
        for change in changes:
            if not sp.is_strict_child(folder.server_path, change.server_item):
                continue

            remainder = sp.make_relative(change.server_item, folder.server_path)
            first = remainder.split(sp.SEPARATOR, 1)[0]
            if first == remainder:
                continue

            child_path = sp.combine(folder.server_path, first)
            child_key = sp.key(child_path)
            # any occupant wins, including a deleted one
            if child_key in children:
                continue

            children[child_key] = FolderItem(server_path=child_path, item_type=ItemType.FOLDER)


def _is_usable(folder: FolderItem, include_deleted: bool) -> bool:
    state = folder.children_state
    if state == ChildrenState.EMPTY:
        return True
    if state != ChildrenState.CACHED:
        return False
    return folder.children_include_deleted == include_deleted


def _visible(item: Item, include_deleted: bool) -> bool:
    return include_deleted or not item.is_deleted


def _add_with_dedup(children: dict[str, Item], item: Item) -> None:
    """
    At most one item per path.

    A non-deleted occupant is kept; otherwise the item with the higher
    deletion id is kept.
    """
    k = sp.key(item.server_path)
    existing = children.get(k)
    if existing is None:
        children[k] = item
        return
    if not existing.is_deleted:
        return
    if not item.is_deleted or item.deletion_id > existing.deletion_id:
        children[k] = item
