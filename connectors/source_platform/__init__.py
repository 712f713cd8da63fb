"""Upstream data platform connector (company profiles and company lists)."""

from connectors.source_platform.sp_client import (
    AssetProfile,
    GroupProfile,
    SourcePlatformClient,
    SourcePlatformConfig,
    SourcePlatformError,
    build_asset_profile,
    build_group_profile,
    parse_breakdown,
)

__all__ = [
    "AssetProfile",
    "GroupProfile",
    "SourcePlatformClient",
    "SourcePlatformConfig",
    "SourcePlatformError",
    "build_asset_profile",
    "build_group_profile",
    "parse_breakdown",
]
