"""TFVC REST controller: item queries over HTTP."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional, Sequence

import requests

from tfvcmgr.auth import AuthInfo
from tfvcmgr.errors import (
    ApiError,
    HttpErrorInfo,
    InvalidArgumentError,
    NetworkError,
    map_http_error,
)
from tfvcmgr.models import FolderItem, Item, ItemType
from tfvcmgr.util import parse_server_date
from tfvcmgr.util import server_path as sp

from .fields import DEFAULT_API_VERSION, ITEMS_ENDPOINT, RECURSION_LEVELS
from .protocols import DeletedState, GetItemsOptions, RecursionType

logger = logging.getLogger(__name__)


class TfvcRestController:
    """
    Item query service backed by the TFVC REST API.

    Notes:
        - The requests Session is owned by the controller.
        - No retry: transport failures are mapped and raised immediately.
        - The REST endpoint knows nothing about item type or deleted-state
          filters, so those are applied client side.
    """

    DEFAULT_TIMEOUT_SEC: float = 30.0

    def __init__(
        self,
        collection_url: str,
        auth_info: AuthInfo,
        *,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        api_version: str = DEFAULT_API_VERSION,
    ) -> None:
        session = requests.Session()
        session.auth = auth_info.requests_auth()
        session.headers.update({"Accept": "application/json"})
        self._init(session, collection_url, timeout_sec=timeout_sec, api_version=api_version)

    @classmethod
    def from_session(
        cls,
        session: Any,
        collection_url: str,
        *,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        api_version: str = DEFAULT_API_VERSION,
    ) -> "TfvcRestController":
        """Create controller from a pre-built session (useful for tests)."""
        obj = cls.__new__(cls)
        obj._init(session, collection_url, timeout_sec=timeout_sec, api_version=api_version)
        return obj

    def _init(self, session: Any, collection_url: str, *, timeout_sec: float, api_version: str) -> None:
        if not isinstance(collection_url, str) or not collection_url.strip():
            raise InvalidArgumentError("collection_url must be a non-empty string")
        self._session = session
        self._base_url = collection_url.strip().rstrip("/")
        self._timeout_sec = timeout_sec
        self._api_version = api_version

    # ----------------------------
    # Public API
    # ----------------------------
    def query_items_extended(
        self,
        paths: Sequence[str],
        item_type: ItemType,
        deleted_state: DeletedState,
        recursion: RecursionType,
        options: GetItemsOptions,
    ) -> list[list[Item]]:
        results: list[list[Item]] = []
        for path in paths:
            items = self._list_items(sp.canonicalize(path), recursion)
            items = [i for i in items if _matches(i, item_type, deleted_state)]
            if not options & GetItemsOptions.UNSORTED:
                items.sort(key=functools.cmp_to_key(lambda a, b: sp.compare_top_down(a.server_path, b.server_path)))
            results.append(items)
        return results

    def get_item(self, server_path: str) -> Optional[Item]:
        """Return the item at server_path, or None if the server has none."""
        items = self._list_items(sp.canonicalize(server_path), RecursionType.NONE)
        return items[0] if items else None

    def close(self) -> None:
        self._session.close()

    # ----------------------------
    # Internal
    # ----------------------------
    def _list_items(self, scope_path: str, recursion: RecursionType) -> list[Item]:
        url = f"{self._base_url}/{ITEMS_ENDPOINT}"
        params = {
            "scopePath": scope_path,
            "recursionLevel": RECURSION_LEVELS[recursion],
            "api-version": self._api_version,
        }
        logger.debug("GET %s scopePath=%s recursionLevel=%s", url, scope_path, params["recursionLevel"])

        data = self._execute(lambda: self._session.get(url, params=params, timeout=self._timeout_sec))

        value = data.get("value", []) if isinstance(data, dict) else []
        return [_item_dict_to_item(d) for d in value if isinstance(d, dict) and d.get("path")]

    def _execute(self, func: Callable[[], Any]) -> Any:
        try:
            response = func()
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise NetworkError("Network error", cause=exc) from exc
        except requests.RequestException as exc:
            raise ApiError("TFVC REST request failed", cause=exc) from exc

        if response.status_code >= 400:
            info = _response_to_info(response)
            raise map_http_error(info)

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("TFVC REST response is not JSON", cause=exc) from exc


def _matches(item: Item, item_type: ItemType, deleted_state: DeletedState) -> bool:
    if item_type == ItemType.FILE and item.is_folder:
        return False
    if item_type in (ItemType.FOLDER, ItemType.ROOT) and not item.is_folder:
        return False
    if deleted_state == DeletedState.NON_DELETED and item.is_deleted:
        return False
    if deleted_state == DeletedState.DELETED and not item.is_deleted:
        return False
    return True


def _item_dict_to_item(data: dict[str, Any]) -> Item:
    path = sp.canonicalize(data["path"])

    change_date = None
    if isinstance(data.get("changeDate"), str):
        try:
            change_date = parse_server_date(data["changeDate"])
        except ValueError:
            change_date = None

    version = data.get("version")
    deletion_id = data.get("deletionId")

    common: dict[str, Any] = {
        "server_path": path,
        "remote_version": version if isinstance(version, int) else 0,
        "deletion_id": deletion_id if isinstance(deletion_id, int) else 0,
        "is_branch": bool(data.get("isBranch", False)),
        "change_date": change_date,
    }

    if path == sp.ROOT:
        return FolderItem(item_type=ItemType.ROOT, **common)
    if data.get("isFolder"):
        return FolderItem(item_type=ItemType.FOLDER, **common)
    return Item(item_type=ItemType.FILE, **common)


def _response_to_info(response: Any) -> HttpErrorInfo:
    status_code = getattr(response, "status_code", None)
    reason = getattr(response, "reason", None)

    message = None
    details: dict[str, Any] = {}

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        if isinstance(payload.get("message"), str):
            message = payload["message"]
        if isinstance(payload.get("typeKey"), str):
            details["type_key"] = payload["typeKey"]

    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
