"""tfvcmgr public API."""

from __future__ import annotations

from tfvcmgr.auth import AuthInfo
from tfvcmgr.controller import TfvcRestController
from tfvcmgr.errors import (
    ApiError,
    AuthError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidServerPathError,
    InvalidStateError,
    NetworkError,
    NotFoundError,
    PermissionError,
    PolicyEvaluationCancelledError,
    PolicyEvaluationError,
    PolicyLoadError,
    PreconditionError,
    RateLimitError,
    TfvcMgrError,
    TransportError,
    map_http_error,
)
from tfvcmgr.local import ItemTreeCache, PendingChangeCollection
from tfvcmgr.models import (
    ChangeType,
    CheckinConflict,
    CheckinEvaluationResult,
    CheckinNote,
    CheckinNoteFailure,
    CheckinNoteFieldDefinition,
    CheckinNoteFieldValue,
    CheckinWorkItemAction,
    EvaluationCanceled,
    FolderItem,
    Item,
    ItemType,
    PendingChange,
    PolicyEvaluatorState,
    PolicyFailure,
    WorkItemCheckinInfo,
)
from tfvcmgr.pendingcheckin import (
    AffectedScopeTracker,
    CheckinEvaluationOptions,
    CheckinEvaluationPipeline,
    PendingCheckin,
)
from tfvcmgr.policy import (
    CancellationToken,
    CheckinPolicy,
    MappingPolicyLoader,
    PolicyContext,
    PolicyDefinition,
    PolicyEvaluator,
)

__all__ = [
    # High-level
    "ItemTreeCache",
    "PendingChangeCollection",
    "PendingCheckin",
    "AffectedScopeTracker",
    "CheckinEvaluationPipeline",
    "CheckinEvaluationOptions",
    "TfvcRestController",
    # Auth
    "AuthInfo",
    # Policies
    "CancellationToken",
    "PolicyContext",
    "PolicyDefinition",
    "CheckinPolicy",
    "MappingPolicyLoader",
    "PolicyEvaluator",
    # Models
    "Item",
    "FolderItem",
    "ItemType",
    "ChangeType",
    "PendingChange",
    "CheckinNoteFieldDefinition",
    "CheckinNoteFieldValue",
    "CheckinNote",
    "CheckinNoteFailure",
    "CheckinConflict",
    "PolicyFailure",
    "PolicyEvaluatorState",
    "CheckinEvaluationResult",
    "EvaluationCanceled",
    "WorkItemCheckinInfo",
    "CheckinWorkItemAction",
    # Errors
    "TfvcMgrError",
    "InvalidArgumentError",
    "PreconditionError",
    "InvalidServerPathError",
    "InvalidStateError",
    "TransportError",
    "AuthError",
    "PermissionError",
    "NotFoundError",
    "RateLimitError",
    "NetworkError",
    "ApiError",
    "PolicyEvaluationCancelledError",
    "PolicyEvaluationError",
    "PolicyLoadError",
    "HttpErrorInfo",
    "map_http_error",
]
