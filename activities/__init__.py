"""Activity definitions module."""

from activities.reports import (
    generate_asset_report_activity,
    generate_group_report_activity,
    AssetReportInput,
    GroupReportInput,
    ReportOutput,
)

__all__ = [
    "generate_asset_report_activity",
    "generate_group_report_activity",
    "AssetReportInput",
    "GroupReportInput",
    "ReportOutput",
]
