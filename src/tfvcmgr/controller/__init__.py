"""Server collaborators: protocols and the REST controller."""

from __future__ import annotations

from .protocols import (
    CheckinNoteDefinitionSource,
    ConflictDetector,
    DeletedState,
    GetItemsOptions,
    ItemQueryService,
    PendingChangeCache,
    PolicyEvaluator,
    RecursionType,
)
from .rest_controller import TfvcRestController

__all__ = [
    "TfvcRestController",
    "ItemQueryService",
    "ConflictDetector",
    "CheckinNoteDefinitionSource",
    "PendingChangeCache",
    "PolicyEvaluator",
    "DeletedState",
    "RecursionType",
    "GetItemsOptions",
]
