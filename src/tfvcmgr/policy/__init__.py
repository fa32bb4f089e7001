"""Check-in policy framework."""

from __future__ import annotations

from .builtin import CommentRequiredPolicy, DisallowedPathPolicy
from .cancellation import CancellationToken
from .context import PolicyContext
from .definitions import (
    CheckinPolicy,
    LoadErrorPolicy,
    MappingPolicyLoader,
    PolicyDefinition,
    PolicyDefinitionSource,
    PolicyLoader,
)
from .evaluator import PolicyEvaluator, PolicyEvaluatorStateChangedEvent, PolicyLoadErrorEvent

__all__ = [
    "CancellationToken",
    "PolicyContext",
    "PolicyDefinition",
    "PolicyDefinitionSource",
    "PolicyLoader",
    "MappingPolicyLoader",
    "CheckinPolicy",
    "LoadErrorPolicy",
    "CommentRequiredPolicy",
    "DisallowedPathPolicy",
    "PolicyEvaluator",
    "PolicyEvaluatorStateChangedEvent",
    "PolicyLoadErrorEvent",
]
