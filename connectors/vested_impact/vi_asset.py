"""Asset endpoints of the Vested Impact API."""

from typing import Any, Dict, List
import logging

from pydantic import ValidationError as PydanticValidationError

from connectors.vested_impact.vi_client import VIApiError, VIConflictError
from connectors.vested_impact.vi_models import (
    AssetBasics,
    AssetBreakdown,
    AssetCreateInput,
    AssetCreateResponse,
    AssetSearchResult,
    AssetSearchResults,
)
from connectors.vested_impact.vi_resource import VIResourceAPI

logger = logging.getLogger(__name__)


class VIAssetAPI(VIResourceAPI):
    """Asset operations: create, search, basics/breakdown and impact."""

    prefix = "asset"

    async def search_assets(self, name: str) -> List[AssetSearchResult]:
        body = await self.client.request_json("GET", self._search_path(name))
        return AssetSearchResults.model_validate(body or {}).results

    async def create_asset(self, asset: AssetCreateInput) -> AssetCreateResponse:
        """Create an asset, refusing when an identical one already exists.

        An existing asset with the same name and industry is reported as a
        conflict without POSTing.

        Raises:
            VIConflictError: Duplicate found, or the service answered 409
            VIApiError: Any other failure
        """
        for existing in await self.search_assets(asset.name):
            if existing.name == asset.name and existing.industry == asset.industry:
                logger.info(f"Asset '{asset.name}' already exists as {existing.id}")
                raise VIConflictError("Asset already exists", 409, "")

        body = await self.client.request_json("POST", f"/{self.prefix}", data=asset.model_dump())
        try:
            return AssetCreateResponse.model_validate(body or {})
        except PydanticValidationError as e:
            raise VIApiError(f"Unexpected asset create response: {e}", 200, str(body))

    async def update_basics(self, asset_id: str, basics: Dict[str, Any]) -> None:
        await self._put(asset_id, "basics", AssetBasics.model_validate(basics).model_dump())

    async def update_breakdown(self, asset_id: str, breakdown: AssetBreakdown) -> None:
        await self._put(asset_id, "breakdown", breakdown.model_dump())
