"""Vested Impact data API connector.

Importing this package registers the asset and group gateways.
"""

from connectors.vested_impact.vi_client import (
    VIApiClient,
    VIApiConfig,
    VIApiError,
    VIAuthenticationError,
    VIConflictError,
    VINotFoundError,
)
from connectors.vested_impact.vi_asset import VIAssetAPI
from connectors.vested_impact.vi_group import VIGroupAPI
from connectors.vested_impact.vi_reference import ActivityCache, ReferenceSnapshot, VIReferenceAPI
from connectors.vested_impact.vi_gateway import AssetGateway, GroupGateway

__all__ = [
    "VIApiClient",
    "VIApiConfig",
    "VIApiError",
    "VIAuthenticationError",
    "VIConflictError",
    "VINotFoundError",
    "VIAssetAPI",
    "VIGroupAPI",
    "VIReferenceAPI",
    "ActivityCache",
    "ReferenceSnapshot",
    "AssetGateway",
    "GroupGateway",
]
