"""Context handed to policies while they are initialized and evaluated."""

from __future__ import annotations

import threading
from typing import Any, Mapping, Optional

from .cancellation import CancellationToken


class PolicyContext:
    """
    Property bag plus the cancellation token for one evaluation.

    The same context is shared by every stage of a checkin evaluation, so
    cancelling its token stops the whole evaluation, not only the policies.
    """

    def __init__(
        self,
        cancellation_token: Optional[CancellationToken] = None,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._cancellation_token = cancellation_token or CancellationToken()
        self._lock = threading.Lock()
        self._properties: dict[str, Any] = dict(properties or {})

    @property
    def cancellation_token(self) -> CancellationToken:
        return self._cancellation_token

    def add_property(self, key: str, value: Any) -> None:
        with self._lock:
            self._properties[key] = value

    def get_property(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._properties.get(key, default)

    def remove_property(self, key: str) -> None:
        with self._lock:
            self._properties.pop(key, None)
