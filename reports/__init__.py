"""Report Pipeline - caller-facing report generation for assets and groups.

Usage:
    from reports import generate_asset_report

    result = await generate_asset_report(descriptor, basics, breakdown=None)
    print(result.id, result.status, result.message)
"""

from reports.models import (
    STATUS_PARTIAL,
    STATUS_SUCCESS,
    AssetReportRequest,
    GroupReportRequest,
    ReportResult,
)
from reports.pipeline import (
    AssetSpec,
    GroupSpec,
    ReportPipeline,
    ResourceSpec,
    generate_asset_report,
    generate_group_report,
    poll_config_from_settings,
)

__all__ = [
    "STATUS_PARTIAL",
    "STATUS_SUCCESS",
    "AssetReportRequest",
    "GroupReportRequest",
    "ReportResult",
    "AssetSpec",
    "GroupSpec",
    "ReportPipeline",
    "ResourceSpec",
    "generate_asset_report",
    "generate_group_report",
    "poll_config_from_settings",
]
