"""Vested Impact gateways.

Implements ImpactResourceGateway for assets and asset groups on top of the
VIAssetAPI / VIGroupAPI endpoint classes. Service responses are mapped to the
normalized refs in connectors.impact_base.
"""

from typing import Any, Dict, List, Optional

from connectors.impact_base import (
    CalculationStatus,
    CreateOutcomeRef,
    HistoryEntryRef,
    ImpactResourceGateway,
    ResourceKind,
    SearchHit,
    register_gateway,
)
from connectors.vested_impact.vi_asset import VIAssetAPI
from connectors.vested_impact.vi_client import VIApiClient, VIConflictError, VINotFoundError
from connectors.vested_impact.vi_group import VIGroupAPI
from connectors.vested_impact.vi_models import (
    AssetBreakdown,
    AssetCreateInput,
    AssetGroupCreateInput,
    AssetGroupHoldings,
)
from connectors.vested_impact.vi_resource import VIResourceAPI


class _VIGatewayBase(ImpactResourceGateway):
    """Status, report and history calls shared by both resource kinds."""

    api: VIResourceAPI

    async def trigger(self, resource_id: str) -> None:
        await self.api.calculate_impact(resource_id)

    async def get_status(self, resource_id: str) -> CalculationStatus:
        return await self.api.get_impact_status(resource_id)

    async def get_report(self, resource_id: str) -> Optional[Dict[str, Any]]:
        try:
            body = await self.api.get_impact_report(resource_id)
        except VINotFoundError:
            return None
        return body if isinstance(body, dict) else None

    async def list_history(self, resource_id: str) -> List[HistoryEntryRef]:
        history = await self.api.get_impact_history(resource_id)
        return [HistoryEntryRef.model_validate(entry.model_dump()) for entry in history.reports]

    async def delete_history_entry(self, resource_id: str, report_id: str) -> bool:
        return await self.api.delete_impact_report(resource_id, report_id)


@register_gateway(ResourceKind.ASSET)
class AssetGateway(_VIGatewayBase):
    """Gateway over /asset. Identifying key: name + industry.

    Push payload: {"basics": {...}, "breakdown": [{activityId, countryCode, weight}, ...]}
    """

    kind = ResourceKind.ASSET

    def __init__(self, client: VIApiClient):
        self.api = VIAssetAPI(client)

    async def create(self, descriptor: Dict[str, Any]) -> CreateOutcomeRef:
        try:
            created = await self.api.create_asset(AssetCreateInput.model_validate(descriptor))
        except VIConflictError as e:
            return CreateOutcomeRef(already_exists=True, message=str(e))
        return CreateOutcomeRef(
            resource_id=created.asset.id,
            suggestions=created.suggestedActivities,
        )

    async def search(self, name: str) -> List[SearchHit]:
        results = await self.api.search_assets(name)
        return [SearchHit(id=r.id, name=r.name, industry=r.industry) for r in results]

    def matches(self, hit: SearchHit, descriptor: Dict[str, Any]) -> bool:
        return hit.name == descriptor.get("name") and hit.industry == descriptor.get("industry")

    async def push(self, resource_id: str, payload: Dict[str, Any]) -> None:
        # Basics must land before the breakdown
        await self.api.update_basics(resource_id, payload["basics"])
        await self.api.update_breakdown(
            resource_id,
            AssetBreakdown.model_validate({"breakdown": payload.get("breakdown", [])}),
        )


@register_gateway(ResourceKind.GROUP)
class GroupGateway(_VIGatewayBase):
    """Gateway over /group. Identifying key: name.

    Push payload: {"holdings": [{id, weight}, ...]}
    """

    kind = ResourceKind.GROUP

    def __init__(self, client: VIApiClient):
        self.api = VIGroupAPI(client)

    async def create(self, descriptor: Dict[str, Any]) -> CreateOutcomeRef:
        try:
            record = await self.api.create_group(AssetGroupCreateInput.model_validate(descriptor))
        except VIConflictError as e:
            return CreateOutcomeRef(already_exists=True, message=str(e))
        return CreateOutcomeRef(resource_id=record.id)

    async def search(self, name: str) -> List[SearchHit]:
        results = await self.api.search_groups(name)
        return [SearchHit(id=r.id, name=r.name, owner=r.owner) for r in results]

    def matches(self, hit: SearchHit, descriptor: Dict[str, Any]) -> bool:
        return hit.name == descriptor.get("name")

    async def push(self, resource_id: str, payload: Dict[str, Any]) -> None:
        await self.api.update_holdings(
            resource_id,
            AssetGroupHoldings.model_validate({"holdings": payload.get("holdings", [])}),
        )
