"""Data model for server items (files, folders, the repository root)."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from tfvcmgr.util import server_path as sp


class ItemType(str, Enum):
    """Kind of a server item. ANY is only meaningful as a query filter."""

    FILE = "file"
    FOLDER = "folder"
    ROOT = "root"
    ANY = "any"


class ChildrenState(str, Enum):
    """Lifecycle of a folder's child map."""

    UNCOMPUTED = "uncomputed"
    CACHED = "cached"
    EMPTY = "empty"


@dataclass(slots=True, eq=False)
class Item:
    """
    A versioned item as known to the client.

    Notes:
        - Identity is the full server path, compared case-insensitively.
        - deletion_id == 0 means the item is not deleted.
        - source_server_path is only set for renamed/branched items.
    """

    server_path: str
    item_type: ItemType = ItemType.FILE

    local_path: Optional[str] = None
    remote_version: int = 0
    local_version: int = 0
    deletion_id: int = 0
    source_server_path: Optional[str] = None
    is_branch: bool = False
    change_date: Optional[datetime] = None

    @property
    def name(self) -> str:
        return sp.get_file_name(self.server_path)

    @property
    def is_deleted(self) -> bool:
        return self.deletion_id != 0

    @property
    def is_folder(self) -> bool:
        return self.item_type in (ItemType.FOLDER, ItemType.ROOT)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return sp.key(self.server_path) == sp.key(other.server_path)

    def __hash__(self) -> int:
        return hash(sp.key(self.server_path))


@dataclass(slots=True, eq=False)
class FolderItem(Item):
    """
    A folder (or the root) with a lazily computed child map.

    The child map and its state are owned by ItemTreeCache; callers read
    them through the cache, never directly.

    Notes:
        - children maps case-folded child path -> Item.
        - children_include_deleted records the mode the map was built in.
        - children is replaced as a whole, so a reader holding the old
          map never sees a half-built one.
    """

    item_type: ItemType = ItemType.FOLDER

    children_state: ChildrenState = ChildrenState.UNCOMPUTED
    children_include_deleted: bool = False
    children: dict[str, Item] = field(default_factory=dict, repr=False)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def root(cls) -> "FolderItem":
        return cls(server_path=sp.ROOT, item_type=ItemType.ROOT)
