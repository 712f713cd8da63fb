"""Impact Compute Orchestrator - push, trigger and poll remote calculations."""

from compute.orchestrator import (
    HistoryPurgeResult,
    ImpactComputeOrchestrator,
    PollConfig,
    is_well_formed_report,
)

__all__ = [
    "HistoryPurgeResult",
    "ImpactComputeOrchestrator",
    "PollConfig",
    "is_well_formed_report",
]
