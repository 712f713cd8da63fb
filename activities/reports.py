"""Report activities for the impact report pipeline.

Temporal activities that run one asset or group report to completion. Status
reads during polling heartbeat the activity, so a stuck calculation shows up
as a heartbeat timeout and worker cancellation reaches the poll loop.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from temporalio import activity

from connectors.impact_base import CalculationStatus
from connectors.vested_impact import VIApiClient, VIApiConfig
from core.config import Settings, load_settings
from core.observability.logging import get_logger, with_correlation
from reports import ReportResult, generate_asset_report, generate_group_report

logger = get_logger(__name__)


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class AssetReportInput:
    """Input for generate_asset_report_activity.

    Attributes:
        asset: {name, description, industry, hqCountryCode, numEmployees}
        basics: {currency, revenue, revenueGrowth, description, hqCountryCode,
            industry, name, numEmployees}
        breakdown: Optional [{activityId, countryCode, weight}]
        regenerate: Purge existing report history and recompute
        suggest_from_reference: Fall back to the industry's reference activities
    """
    asset: Dict[str, Any]
    basics: Dict[str, Any]
    breakdown: Optional[List[Dict[str, Any]]] = None
    regenerate: bool = False
    suggest_from_reference: bool = False


@dataclass
class GroupReportInput:
    """Input for generate_group_report_activity."""
    group: Dict[str, Any]
    holdings: List[Dict[str, Any]] = field(default_factory=list)
    regenerate: bool = False


@dataclass
class ReportOutput:
    """Output of both report activities."""
    id: str
    status: str  # success or partial
    message: str
    kind: str = ""
    created: bool = False
    report_reused: bool = False
    cleanup_warnings: List[str] = field(default_factory=list)

    @classmethod
    def from_result(cls, result: ReportResult) -> "ReportOutput":
        return cls(**result.to_dict())


# =============================================================================
# Helpers
# =============================================================================

def create_api_client(settings: Settings) -> VIApiClient:
    return VIApiClient(VIApiConfig.from_settings(settings))


def _heartbeat(status: CalculationStatus, read_number: int) -> None:
    activity.heartbeat({"status": status.value, "reads": read_number})


async def _run(kind: str, runner) -> ReportOutput:
    info = activity.info()
    settings = load_settings()
    client = create_api_client(settings)
    try:
        with with_correlation(
            resource_kind=kind,
            workflow_id=info.workflow_id,
            workflow_run_id=info.workflow_run_id,
            activity_name=info.activity_type,
        ):
            result = await runner(client, settings)
    finally:
        await client.close()
    return ReportOutput.from_result(result)


# =============================================================================
# Activities
# =============================================================================

@activity.defn
async def generate_asset_report_activity(input: AssetReportInput) -> ReportOutput:
    """Create or adopt an asset and generate its impact report."""
    logger.info(f"Generating asset report for '{input.asset.get('name')}'")

    async def runner(client: VIApiClient, settings: Settings) -> ReportResult:
        return await generate_asset_report(
            input.asset,
            input.basics,
            input.breakdown,
            input.regenerate,
            settings=settings,
            client=client,
            suggest_from_reference=input.suggest_from_reference,
            on_status=_heartbeat,
        )

    return await _run("asset", runner)


@activity.defn
async def generate_group_report_activity(input: GroupReportInput) -> ReportOutput:
    """Create or adopt an asset group and generate its impact report."""
    logger.info(f"Generating group report for '{input.group.get('name')}'")

    async def runner(client: VIApiClient, settings: Settings) -> ReportResult:
        return await generate_group_report(
            input.group,
            input.holdings,
            input.regenerate,
            settings=settings,
            client=client,
            on_status=_heartbeat,
        )

    return await _run("group", runner)
