"""Asset group endpoints of the Vested Impact API."""

from typing import List

from pydantic import ValidationError as PydanticValidationError

from connectors.vested_impact.vi_client import VIApiError
from connectors.vested_impact.vi_models import (
    AssetGroupCreateInput,
    AssetGroupHoldings,
    AssetGroupRecord,
    GroupSearchResult,
    GroupSearchResults,
)
from connectors.vested_impact.vi_resource import VIResourceAPI


class VIGroupAPI(VIResourceAPI):
    """Asset group operations: create, search, holdings and impact."""

    prefix = "group"

    async def search_groups(self, name: str) -> List[GroupSearchResult]:
        body = await self.client.request_json("GET", self._search_path(name))
        return GroupSearchResults.model_validate(body or {}).results

    async def create_group(self, group: AssetGroupCreateInput) -> AssetGroupRecord:
        """Create an asset group.

        Raises:
            VIConflictError: The service answered 409
            VIApiError: Any other failure, including a response without an id
        """
        body = await self.client.request_json("POST", f"/{self.prefix}", data=group.model_dump())
        try:
            record = AssetGroupRecord.model_validate(body or {})
        except PydanticValidationError as e:
            raise VIApiError(f"Unexpected group create response: {e}", 200, str(body))
        if not record.id:
            raise VIApiError("API returned group without ID.", 200, str(body))
        return record

    async def update_holdings(self, group_id: str, holdings: AssetGroupHoldings) -> None:
        await self._put(group_id, "holdings", holdings.model_dump())
