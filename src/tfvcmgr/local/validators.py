"""Call-time argument checks (raised before any I/O)."""

from __future__ import annotations

from typing import Any

from tfvcmgr.errors import PreconditionError
from tfvcmgr.models import FolderItem


def check_not_none(value: Any, what: str) -> None:
    if value is None:
        raise PreconditionError(f"{what} must not be None")


def check_not_empty(value: str, what: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise PreconditionError(f"{what} must be a non-empty string")


def check_is_folder(folder: Any, what: str = "folder") -> None:
    check_not_none(folder, what)
    if not isinstance(folder, FolderItem):
        raise PreconditionError(
            f"{what} must be a FolderItem: {getattr(folder, 'server_path', folder)!r}"
        )
