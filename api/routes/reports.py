"""Impact report endpoints.

Runs the report pipeline for assets and asset groups, either from a payload
in the request body or from a profile read from the upstream data platform.
"""

from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from connectors.source_platform import SourcePlatformClient, SourcePlatformConfig, SourcePlatformError
from connectors.vested_impact import VIApiClient, VIApiConfig
from core.config import Settings, load_settings
from core.errors import ConfigurationError, ReconciliationError, ValidationError
from core.observability.logging import get_logger
from core.observability.metrics import get_metrics
from reports import ReportResult, generate_asset_report, generate_group_report


router = APIRouter()
logger = get_logger(__name__)


# =============================================================================
# Request / Response Models
# =============================================================================

class AssetReportBody(BaseModel):
    """Asset report request. Field checks are done by the pipeline."""
    asset: Dict[str, Any] = Field(..., description="Asset descriptor")
    basics: Dict[str, Any] = Field(..., description="Asset basics")
    breakdown: Optional[List[Dict[str, Any]]] = Field(None, description="Activity breakdown")
    regenerate: bool = Field(False, description="Purge existing reports and recompute")


class GroupReportBody(BaseModel):
    """Group report request."""
    group: Dict[str, Any] = Field(..., description="Group descriptor")
    holdings: Any = Field(..., description="[{id, weight}] or {holdings: [...]}")
    regenerate: bool = False


class ReportResponse(BaseModel):
    id: str
    status: str
    message: str
    kind: str = ""
    created: bool = False
    report_reused: bool = False
    cleanup_warnings: List[str] = []

    @classmethod
    def from_result(cls, result: ReportResult) -> "ReportResponse":
        return cls(**result.to_dict())


# =============================================================================
# Dependencies
# =============================================================================

def get_settings() -> Settings:
    try:
        return load_settings()
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))


async def get_api_client(settings: Settings = Depends(get_settings)) -> AsyncGenerator[VIApiClient, None]:
    client = VIApiClient(VIApiConfig.from_settings(settings))
    try:
        yield client
    finally:
        await client.close()


async def get_source_client(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[SourcePlatformClient, None]:
    try:
        config = SourcePlatformConfig.from_settings(settings)
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    client = SourcePlatformClient(config)
    try:
        yield client
    finally:
        await client.close()


async def _run(coro) -> ReportResponse:
    """Await a pipeline call, mapping its errors to HTTP responses."""
    try:
        result = await coro
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "errors": e.errors})
    except ReconciliationError as e:
        raise HTTPException(
            status_code=502,
            detail={
                "message": str(e),
                "reason": e.reason.value,
                "create_outcome": e.create_outcome.value,
            },
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return ReportResponse.from_result(result)


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/asset", response_model=ReportResponse)
async def create_asset_report(
    body: AssetReportBody,
    settings: Settings = Depends(get_settings),
    client: VIApiClient = Depends(get_api_client),
) -> ReportResponse:
    """Create or adopt an asset and generate its impact report."""
    return await _run(generate_asset_report(
        body.asset,
        body.basics,
        body.breakdown,
        body.regenerate,
        settings=settings,
        client=client,
    ))


@router.post("/group", response_model=ReportResponse)
async def create_group_report(
    body: GroupReportBody,
    settings: Settings = Depends(get_settings),
    client: VIApiClient = Depends(get_api_client),
) -> ReportResponse:
    """Create or adopt an asset group and generate its impact report."""
    return await _run(generate_group_report(
        body.group,
        body.holdings,
        body.regenerate,
        settings=settings,
        client=client,
    ))


@router.post("/asset/source/{profile_id}", response_model=ReportResponse)
async def create_asset_report_from_source(
    profile_id: str,
    regenerate: bool = False,
    settings: Settings = Depends(get_settings),
    client: VIApiClient = Depends(get_api_client),
    source: SourcePlatformClient = Depends(get_source_client),
) -> ReportResponse:
    """Generate an asset report from an upstream company profile."""
    try:
        profile = await source.fetch_asset_profile(profile_id)
    except SourcePlatformError as e:
        logger.error(f"Error fetching company profile {profile_id}: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return await _run(generate_asset_report(
        profile.descriptor,
        profile.basics,
        profile.breakdown,
        regenerate,
        settings=settings,
        client=client,
    ))


@router.post("/group/source/{list_id}", response_model=ReportResponse)
async def create_group_report_from_source(
    list_id: str,
    regenerate: bool = False,
    settings: Settings = Depends(get_settings),
    client: VIApiClient = Depends(get_api_client),
    source: SourcePlatformClient = Depends(get_source_client),
) -> ReportResponse:
    """Generate a group report from an upstream company list."""
    try:
        profile = await source.fetch_group_profile(list_id)
    except SourcePlatformError as e:
        logger.error(f"Error fetching company list {list_id}: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return await _run(generate_group_report(
        profile.descriptor,
        profile.holdings,
        regenerate,
        settings=settings,
        client=client,
    ))


@router.get("/metrics")
async def report_metrics() -> Dict[str, Any]:
    """Report run, transport and timing metrics since startup."""
    return get_metrics().get_summary()
