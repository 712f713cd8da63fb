"""Report pipeline inputs and result."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial"


@dataclass
class AssetReportRequest:
    descriptor: Dict[str, Any]
    basics: Dict[str, Any]
    breakdown: Optional[List[Dict[str, Any]]] = None
    regenerate: bool = False


@dataclass
class GroupReportRequest:
    descriptor: Dict[str, Any]
    holdings: Any = None  # list of {id, weight} or {"holdings": [...]}
    regenerate: bool = False


@dataclass
class ReportResult:
    """Outcome of one report run.

    status is "success" or "partial"; a partial result still carries the id
    of the resource that was created or found.
    """
    id: str
    status: str
    message: str
    kind: str = ""
    created: bool = False
    report_reused: bool = False
    cleanup_warnings: List[str] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return self.status == STATUS_SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
