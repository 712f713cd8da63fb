"""Error taxonomy for impact report orchestration.

Fatal errors (abort the workflow, surface to the caller):
- ConfigurationError: missing credential or bad settings
- ValidationError: missing/malformed input fields
- ReconciliationError: create-or-find could not settle on a resource id

Absorbed or downgraded errors:
- TransientTransportError: network failure, retried by the transport
- ComputeFailure: remote calculation ended FAILED, result becomes "partial"
- PollTimeoutError: poll loop exceeded its deadline or attempt cap
- HistoryCleanupWarning: a report history delete failed, logged only
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class ReportError(Exception):
    """Base exception for report orchestration errors."""
    pass


class ConfigurationError(ReportError):
    """Required configuration (e.g. the API key) is missing or invalid."""
    pass


class ValidationError(ReportError):
    """Input failed validation.

    Attributes:
        errors: Mapping of section name (e.g. "asset", "basics", "breakdown")
            to the offending field names or item descriptions.
    """

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.errors: Dict[str, List[str]] = errors or {}

    @property
    def fields(self) -> List[str]:
        """All offending fields, qualified by section."""
        return [
            f"{section}.{name}"
            for section, names in self.errors.items()
            for name in names
        ]


class ZeroWeightSumError(ValidationError):
    """Weights sum to zero, so they cannot be rescaled."""
    pass


class ReconcileFailureReason(str, Enum):
    """Why reconciliation could not produce an id."""
    NO_MATCH = "NO_MATCH"            # search succeeded but nothing matched the key
    SEARCH_FAILED = "SEARCH_FAILED"  # the fallback search call itself failed


class CreateOutcome(str, Enum):
    """What happened on the create call."""
    CREATED = "CREATED"
    CONFLICT = "CONFLICT"  # structured "already exists" response
    ERROR = "ERROR"        # create raised


class ReconciliationError(ReportError):
    """Create-or-find could not resolve a single resource id."""

    def __init__(
        self,
        message: str,
        reason: ReconcileFailureReason,
        create_outcome: CreateOutcome,
    ):
        super().__init__(message)
        self.reason = reason
        self.create_outcome = create_outcome


class TransientTransportError(ReportError):
    """Network-level failure of one HTTP exchange (connection, timeout)."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class ComputeFailure(ReportError):
    """The remote impact calculation reached FAILED."""

    def __init__(self, resource_id: str, status: str = "FAILED"):
        super().__init__(f"Impact calculation failed for {resource_id} (status={status})")
        self.resource_id = resource_id
        self.status = status


class PollTimeoutError(ReportError, TimeoutError):
    """Polling did not reach a terminal status in time."""

    def __init__(self, resource_id: str, attempts: int, last_status: str):
        super().__init__(
            f"Impact calculation for {resource_id} still {last_status} "
            f"after {attempts} status reads"
        )
        self.resource_id = resource_id
        self.attempts = attempts
        self.last_status = last_status


class PollCancelledError(ReportError):
    """Polling was cancelled through the supplied cancellation event."""

    def __init__(self, resource_id: str):
        super().__init__(f"Polling cancelled for {resource_id}")
        self.resource_id = resource_id


@dataclass
class HistoryCleanupWarning:
    """A report history entry that could not be deleted. Logged, never raised."""
    resource_id: str
    report_id: str
    reason: str

    def __str__(self) -> str:
        return f"Failed to delete report {self.report_id} of {self.resource_id}: {self.reason}"
