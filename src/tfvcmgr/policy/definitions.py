"""Policy definitions, loading, and the CheckinPolicy base class."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Protocol, Sequence

from tfvcmgr.errors import PolicyLoadError
from tfvcmgr.models import PolicyFailure

from .context import PolicyContext

if TYPE_CHECKING:  # pragma: no cover
    from tfvcmgr.pendingcheckin.aggregate import PendingCheckin


@dataclass(slots=True, frozen=True)
class PolicyDefinition:
    """
    A policy configured on a team project.

    Notes:
        - type_id names the implementation (resolved by a PolicyLoader).
        - Lower priority values are evaluated first.
    """

    type_id: str
    name: str = ""
    enabled: bool = True
    priority: int = 0
    configuration: Mapping[str, Any] = field(default_factory=dict)


class PolicyDefinitionSource(Protocol):
    def get_checkin_policies_for_server_paths(
        self,
        server_paths: Sequence[str],
    ) -> Sequence[PolicyDefinition]:
        ...


class PolicyLoader(Protocol):
    def load(self, type_id: str) -> Optional["CheckinPolicy"]:
        """
        Return a new policy instance for type_id.

        None means no implementation is known; PolicyLoadError means one was
        found but could not be created.
        """
        ...


class CheckinPolicy:
    """
    Base class for check-in policy implementations.

    Subclasses set type_id/name and implement evaluate().
    """

    type_id: str = ""
    name: str = ""

    def __init__(self) -> None:
        self._pending_checkin: Optional["PendingCheckin"] = None
        self._configuration: dict[str, Any] = {}

    @property
    def pending_checkin(self) -> Optional["PendingCheckin"]:
        return self._pending_checkin

    @property
    def configuration(self) -> Mapping[str, Any]:
        return self._configuration

    def load_configuration(self, configuration: Mapping[str, Any]) -> None:
        self._configuration = dict(configuration)

    def initialize(self, pending_checkin: "PendingCheckin", context: PolicyContext) -> None:
        self._pending_checkin = pending_checkin

    def evaluate(self, context: PolicyContext) -> Sequence[PolicyFailure]:
        raise NotImplementedError

    def close(self) -> None:
        self._pending_checkin = None


class LoadErrorPolicy(CheckinPolicy):
    """Stands in for a policy that could not be loaded; always fails."""

    def __init__(self, message: str, definition: PolicyDefinition) -> None:
        super().__init__()
        self.type_id = definition.type_id
        self.name = definition.name or definition.type_id
        self.message = message

    def load_configuration(self, configuration: Mapping[str, Any]) -> None:
        pass

    # by content: every reload creates a new surrogate
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LoadErrorPolicy):
            return NotImplemented
        return (self.type_id, self.message) == (other.type_id, other.message)

    def __hash__(self) -> int:
        return hash((LoadErrorPolicy, self.type_id, self.message))

    def evaluate(self, context: PolicyContext) -> Sequence[PolicyFailure]:
        return (PolicyFailure(self.message, self),)


class MappingPolicyLoader:
    """PolicyLoader backed by a type_id -> factory mapping."""

    def __init__(self, factories: Mapping[str, Callable[[], CheckinPolicy]]) -> None:
        self._factories = dict(factories)

    def load(self, type_id: str) -> Optional[CheckinPolicy]:
        factory = self._factories.get(type_id)
        if factory is None:
            return None
        try:
            return factory()
        except Exception as exc:
            raise PolicyLoadError(
                f"Could not create policy {type_id}: {exc}",
                details={"type_id": type_id},
                cause=exc,
            ) from exc
