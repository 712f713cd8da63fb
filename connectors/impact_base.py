"""Abstract Impact Service Gateway.

Defines the capability interface the reconciler, the compute orchestrator and
the report pipeline depend on. One gateway instance serves one resource kind
(assets or asset groups); the state machine driving them is shared.

Key Design Principles:
- All methods return NORMALIZED objects (CreateOutcomeRef, SearchHit, ...)
- Pipelines depend ONLY on this interface
- Service-specific implementations live in connector subfolders
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================

class ResourceKind(str, Enum):
    """Kinds of remote resources with impact reports."""
    ASSET = "asset"
    GROUP = "group"


class CalculationStatus(str, Enum):
    """Remote impact calculation status. Observed by polling only."""
    UNKNOWN = "UNKNOWN"
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (CalculationStatus.COMPLETED, CalculationStatus.FAILED)

    @classmethod
    def parse(cls, value: Any) -> "CalculationStatus":
        """Map a raw status value; anything unrecognised is UNKNOWN."""
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


# =============================================================================
# Normalized Reference Types
# =============================================================================

class SuggestedActivity(BaseModel):
    """An activity category the service suggests for a new asset."""
    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Activity id")
    name: Optional[str] = Field(default=None, description="Activity name")
    industry: Optional[str] = Field(default=None, description="Industry the activity belongs to")


class CreateOutcomeRef(BaseModel):
    """Normalized result of a create call.

    Exactly one of these holds:
    - resource_id is set: the resource was created
    - already_exists is True: the service reported a conflict
    """
    resource_id: Optional[str] = None
    already_exists: bool = False
    message: Optional[str] = None
    suggestions: List[SuggestedActivity] = Field(default_factory=list)


class SearchHit(BaseModel):
    """One search-by-name result."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    industry: Optional[str] = None
    owner: Optional[str] = None


class HistoryEntryRef(BaseModel):
    """One entry of a resource's report history."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    report_date: Optional[str] = Field(default=None, alias="reportDate")


# =============================================================================
# Gateway Interface
# =============================================================================

class ImpactResourceGateway(ABC):
    """Capability interface over one kind of remote resource.

    Implementations wrap a concrete API client. Methods raise the client's
    errors on remote failure; interpretation (fallback, downgrade to partial)
    is left to the callers.
    """

    kind: ResourceKind

    @abstractmethod
    async def create(self, descriptor: Dict[str, Any]) -> CreateOutcomeRef:
        """Create the resource described by `descriptor`."""
        pass

    @abstractmethod
    async def search(self, name: str) -> List[SearchHit]:
        """Search resources by name."""
        pass

    @abstractmethod
    def matches(self, hit: SearchHit, descriptor: Dict[str, Any]) -> bool:
        """Whether a search hit has the descriptor's identifying key."""
        pass

    @abstractmethod
    async def push(self, resource_id: str, payload: Dict[str, Any]) -> None:
        """Store the descriptive data (basics/breakdown or holdings)."""
        pass

    @abstractmethod
    async def trigger(self, resource_id: str) -> None:
        """Ask the service to (re)start impact calculation."""
        pass

    @abstractmethod
    async def get_status(self, resource_id: str) -> CalculationStatus:
        """Read the current calculation status."""
        pass

    @abstractmethod
    async def get_report(self, resource_id: str) -> Optional[Dict[str, Any]]:
        """Fetch the current impact report body, None if the service has none."""
        pass

    @abstractmethod
    async def list_history(self, resource_id: str) -> List[HistoryEntryRef]:
        """List the resource's report history."""
        pass

    @abstractmethod
    async def delete_history_entry(self, resource_id: str, report_id: str) -> bool:
        """Delete one history entry. Returns False when the service refused."""
        pass


# =============================================================================
# Gateway Registry
# =============================================================================

_gateway_registry: Dict[ResourceKind, Type[ImpactResourceGateway]] = {}


def register_gateway(kind: ResourceKind):
    """Decorator to register the gateway implementation for a resource kind."""
    def decorator(cls):
        _gateway_registry[kind] = cls
        return cls
    return decorator


def create_gateway(kind: ResourceKind, client: Any) -> ImpactResourceGateway:
    """Create the registered gateway for `kind` over an API client.

    Raises:
        ValueError: If no gateway is registered for the kind
    """
    kind = ResourceKind(kind)
    if kind not in _gateway_registry:
        available = [k.value for k in _gateway_registry]
        raise ValueError(f"Unknown resource kind: {kind.value}. Available: {available}")
    return _gateway_registry[kind](client)


def list_available_gateways() -> List[str]:
    """List all registered resource kinds."""
    return [kind.value for kind in _gateway_registry]
