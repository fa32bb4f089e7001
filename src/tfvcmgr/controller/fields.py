"""Constants for the TFVC REST items endpoint."""

from __future__ import annotations

from .protocols import RecursionType

ITEMS_ENDPOINT: str = "_apis/tfvc/items"

DEFAULT_API_VERSION: str = "5.0"

RECURSION_LEVELS: dict[RecursionType, str] = {
    RecursionType.NONE: "None",
    RecursionType.ONE_LEVEL: "OneLevel",
    RecursionType.FULL: "Full",
}
