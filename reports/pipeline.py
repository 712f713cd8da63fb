"""Report Pipeline.

End-to-end flow for one report run:
1. Validate the caller's descriptor (no network yet)
2. Reconcile the descriptor to one resource id (create or adopt)
3. Pre-existing resource, no regeneration: reuse a well-formed report
4. Pre-existing resource, regeneration: purge the report history
5. Normalize the breakdown or holdings
6. Push, trigger and poll the calculation

Validation, reconciliation and configuration failures raise. Failures of
step 6 downgrade the result to "partial"; the resource id is still returned.
A resource created by this run has no history, so steps 3 and 4 are skipped.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import asyncio
import time

from compute.orchestrator import ImpactComputeOrchestrator, PollConfig, StatusCallback
from connectors.impact_base import ImpactResourceGateway, ResourceKind, SuggestedActivity, create_gateway
from connectors.vested_impact import VIApiClient, VIApiConfig, VIApiError, VIReferenceAPI
from core.config import Settings, load_settings
from core.errors import (
    ComputeFailure,
    PollTimeoutError,
    ReportError,
    TransientTransportError,
    ValidationError,
)
from core.observability.logging import bind_correlation, get_logger, with_correlation
from core.observability.metrics import (
    record_processing_time,
    record_report_failed,
    record_report_finished,
    record_report_started,
)
from normalizer import (
    ActivityIdPolicy,
    normalize_breakdown,
    normalize_holdings,
    validate_asset_inputs,
    validate_group_descriptor,
)
from reconciler import ReconcileResult, ResourceReconciler
from reports.models import (
    STATUS_PARTIAL,
    STATUS_SUCCESS,
    AssetReportRequest,
    GroupReportRequest,
    ReportResult,
)

logger = get_logger(__name__)

# Compute-phase failures that leave the resource in place
PARTIAL_ERRORS = (ComputeFailure, PollTimeoutError, VIApiError, TransientTransportError)


# =============================================================================
# Resource Specs
# =============================================================================

class ResourceSpec(ABC):
    """Per-kind validation, payload building and result messages."""

    kind: ResourceKind
    label: str

    @abstractmethod
    def validate(self, request: Any) -> Any:
        """Check the request before any network call. Returns prepared state."""
        pass

    @abstractmethod
    async def build_payload(self, request: Any, prepared: Any, reconciled: ReconcileResult) -> Dict[str, Any]:
        """The payload for ImpactResourceGateway.push."""
        pass

    def success_message(self, resource_id: str) -> str:
        return f"{self.label} processed successfully."

    def partial_message(self, resource_id: str) -> str:
        return f"{self.label} created/found (ID: {resource_id}), but report generation failed."

    def reused_message(self, resource_id: str) -> str:
        return f"{self.label} already exists. Returning existing report."


class AssetSpec(ResourceSpec):
    """Assets: descriptor + basics, breakdown normalized against suggestions.

    When create yields no suggestions (the asset pre-existed) and a reference
    API is given, the activities of the asset's industry are used instead.
    """

    kind = ResourceKind.ASSET
    label = "Asset"

    def __init__(
        self,
        activity_policy: Optional[ActivityIdPolicy] = None,
        reference_api: Optional[VIReferenceAPI] = None,
    ):
        self.activity_policy = activity_policy
        self.reference_api = reference_api

    def validate(self, request: AssetReportRequest) -> None:
        validate_asset_inputs(request.descriptor, request.basics)
        if request.breakdown is not None and not isinstance(request.breakdown, list):
            raise ValidationError("Breakdown must be a list", {"breakdown": ["<list>"]})

    async def _reference_suggestions(self, industry: str) -> List[SuggestedActivity]:
        try:
            activities = await self.reference_api.fetch_activities(industry)
        except (VIApiError, TransientTransportError) as e:
            logger.warning(f"Could not load activities for industry '{industry}': {e}")
            return []
        return [SuggestedActivity(id=a.id, name=a.name, industry=a.industry or industry) for a in activities]

    async def build_payload(self, request, prepared, reconciled):
        suggestions = list(reconciled.suggestions)
        if not suggestions and self.reference_api is not None:
            suggestions = await self._reference_suggestions(request.basics["industry"])

        breakdown = normalize_breakdown(
            request.breakdown,
            suggestions,
            home_country=request.basics["hqCountryCode"],
            policy=self.activity_policy,
        )
        return {"basics": dict(request.basics), "breakdown": breakdown}

    def success_message(self, resource_id):
        return "Asset processed and report generated successfully."


class GroupSpec(ResourceSpec):
    """Groups: descriptor + holdings. Holdings are normalized up front."""

    kind = ResourceKind.GROUP
    label = "Group"

    def validate(self, request: GroupReportRequest) -> List[Dict[str, Any]]:
        validate_group_descriptor(request.descriptor)
        return normalize_holdings(request.holdings)

    async def build_payload(self, request, prepared, reconciled):
        return {"holdings": prepared}

    def partial_message(self, resource_id):
        return "Group created/found, but impact generation failed."


# =============================================================================
# Pipeline
# =============================================================================

class ReportPipeline:
    """Generic report pipeline over one gateway and one resource spec."""

    def __init__(
        self,
        spec: ResourceSpec,
        gateway: ImpactResourceGateway,
        poll_config: Optional[PollConfig] = None,
        on_status: Optional[StatusCallback] = None,
    ):
        self.spec = spec
        self.gateway = gateway
        self.reconciler = ResourceReconciler(gateway)
        self.orchestrator = ImpactComputeOrchestrator(gateway, poll_config, on_status)

    async def run(
        self,
        request: Any,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ReportResult:
        """Run the pipeline for one request.

        Raises:
            ValidationError: Invalid input (before or after reconciliation)
            ReconciliationError: No single resource id could be settled on
        """
        kind = self.spec.kind.value
        prepared = self.spec.validate(request)

        record_report_started(kind)
        started = time.monotonic()

        with with_correlation(resource_kind=kind, resource_name=request.descriptor.get("name")):
            try:
                result = await self._run(request, prepared, cancel_event)
            except ReportError as e:
                record_report_failed(kind, type(e).__name__)
                logger.error(f"{self.spec.label} report failed: {e}")
                raise

            duration_ms = (time.monotonic() - started) * 1000
            record_report_finished(kind, result.status, duration_ms, reused=result.report_reused)
            logger.info(
                f"{self.spec.label} report finished: {result.status}",
                extra_fields={"duration_ms": round(duration_ms, 1)},
            )
        return result

    async def _run(self, request, prepared, cancel_event) -> ReportResult:
        kind = self.spec.kind.value

        bind_correlation(stage="reconcile")
        reconciled = await self.reconciler.reconcile(request.descriptor)
        resource_id = reconciled.resource_id
        bind_correlation(resource_id=resource_id)

        cleanup_warnings: List[str] = []
        if reconciled.pre_existed and not request.regenerate:
            bind_correlation(stage="reuse")
            report = await self.orchestrator.fetch_existing_report(resource_id)
            if report is not None:
                return ReportResult(
                    id=resource_id,
                    status=STATUS_SUCCESS,
                    message=self.spec.reused_message(resource_id),
                    kind=kind,
                    created=False,
                    report_reused=True,
                )
        elif reconciled.pre_existed:
            bind_correlation(stage="purge")
            purge = await self.orchestrator.purge_history(resource_id)
            cleanup_warnings = [str(w) for w in purge.warnings]

        bind_correlation(stage="normalize")
        normalize_started = time.monotonic()
        payload = await self.spec.build_payload(request, prepared, reconciled)
        record_processing_time("normalize", (time.monotonic() - normalize_started) * 1000)

        bind_correlation(stage="compute")
        status = STATUS_SUCCESS
        try:
            await self.orchestrator.compute(resource_id, payload, cancel_event)
        except PARTIAL_ERRORS as e:
            status = STATUS_PARTIAL
            logger.error(f"Impact report generation failed for {resource_id}: {e}")

        return ReportResult(
            id=resource_id,
            status=status,
            message=(
                self.spec.success_message(resource_id)
                if status == STATUS_SUCCESS
                else self.spec.partial_message(resource_id)
            ),
            kind=kind,
            created=reconciled.created,
            cleanup_warnings=cleanup_warnings,
        )


# =============================================================================
# Public Entry Points
# =============================================================================

def poll_config_from_settings(settings: Settings) -> PollConfig:
    return PollConfig(
        interval=settings.poll_interval,
        max_attempts=settings.poll_max_attempts,
        timeout_seconds=settings.poll_timeout,
    )


async def _run_with_client(
    spec_factory,
    kind: ResourceKind,
    request: Any,
    settings: Optional[Settings],
    client: Optional[VIApiClient],
    poll_config: Optional[PollConfig],
    on_status: Optional[StatusCallback],
    cancel_event: Optional[asyncio.Event],
) -> ReportResult:
    owns_client = client is None
    if client is None:
        settings = settings or load_settings()
        client = VIApiClient(VIApiConfig.from_settings(settings))
    if poll_config is None:
        poll_config = poll_config_from_settings(settings) if settings else PollConfig()

    try:
        pipeline = ReportPipeline(
            spec_factory(client),
            create_gateway(kind, client),
            poll_config=poll_config,
            on_status=on_status,
        )
        return await pipeline.run(request, cancel_event)
    finally:
        if owns_client:
            await client.close()


async def generate_asset_report(
    descriptor: Dict[str, Any],
    basics: Dict[str, Any],
    breakdown: Optional[List[Dict[str, Any]]] = None,
    regenerate: bool = False,
    *,
    settings: Optional[Settings] = None,
    client: Optional[VIApiClient] = None,
    poll_config: Optional[PollConfig] = None,
    activity_policy: Optional[ActivityIdPolicy] = None,
    suggest_from_reference: bool = False,
    on_status: Optional[StatusCallback] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> ReportResult:
    """Create or adopt an asset and generate its impact report.

    Args:
        descriptor: {name, description, industry, hqCountryCode, numEmployees}
        basics: {currency, revenue, revenueGrowth, description, hqCountryCode,
            industry, name, numEmployees}
        breakdown: Optional [{activityId, countryCode, weight}]
        regenerate: Purge the report history of an existing asset and recompute
        settings: Used when no client is given (defaults to load_settings())
        client: Existing API client; not closed by this call
        poll_config: Poll loop bounds (defaults from settings)
        activity_policy: Handling of activity ids outside the suggested set
        suggest_from_reference: Use the industry's reference activities when
            create returns no suggestions
        on_status: Called with (status, read_number) after each status read
        cancel_event: Set to cancel the poll loop

    Raises:
        ConfigurationError, ValidationError, ReconciliationError
    """
    request = AssetReportRequest(descriptor, basics, breakdown, regenerate)

    def spec_factory(api_client: VIApiClient) -> AssetSpec:
        reference_api = VIReferenceAPI(api_client) if suggest_from_reference else None
        return AssetSpec(activity_policy=activity_policy, reference_api=reference_api)

    return await _run_with_client(
        spec_factory, ResourceKind.ASSET, request,
        settings, client, poll_config, on_status, cancel_event,
    )


async def generate_group_report(
    descriptor: Dict[str, Any],
    holdings: Any,
    regenerate: bool = False,
    *,
    settings: Optional[Settings] = None,
    client: Optional[VIApiClient] = None,
    poll_config: Optional[PollConfig] = None,
    on_status: Optional[StatusCallback] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> ReportResult:
    """Create or adopt an asset group and generate its impact report.

    Args:
        descriptor: {name, description, owner}
        holdings: [{id, weight}] or {"holdings": [...]}
        regenerate: Purge the report history of an existing group and recompute

    Raises:
        ConfigurationError, ValidationError, ReconciliationError
    """
    request = GroupReportRequest(descriptor, holdings, regenerate)
    return await _run_with_client(
        lambda api_client: GroupSpec(), ResourceKind.GROUP, request,
        settings, client, poll_config, on_status, cancel_event,
    )
