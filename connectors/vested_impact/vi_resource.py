"""Shared impact endpoints for assets and asset groups.

Both resource kinds expose the same shape under their own prefix:

    GET    /{prefix}/id/{id}
    DELETE /{prefix}/id/{id}
    GET    /{prefix}/search/name/{name}
    POST   /{prefix}/id/{id}/impact/calculate
    GET    /{prefix}/id/{id}/impact/status
    GET    /{prefix}/id/{id}/impact/current
    GET    /{prefix}/id/{id}/impact/id/{reportId}
    GET    /{prefix}/id/{id}/impact/history
    DELETE /{prefix}/id/{id}/impact/id/{reportId}
"""

from typing import Any, Dict, Optional

from connectors.impact_base import CalculationStatus
from connectors.vested_impact.vi_client import VIApiClient, path_segment, raise_for_status
from connectors.vested_impact.vi_models import ImpactHistory


class VIResourceAPI:
    """Base class for one resource prefix of the Vested Impact API."""

    prefix: str = ""

    def __init__(self, client: VIApiClient):
        self.client = client

    def _id_path(self, resource_id: str, *parts: str) -> str:
        path = f"/{self.prefix}/id/{path_segment(resource_id)}"
        if parts:
            path += "/" + "/".join(parts)
        return path

    def _search_path(self, name: str) -> str:
        return f"/{self.prefix}/search/name/{path_segment(name)}"

    async def get(self, resource_id: str) -> Dict[str, Any]:
        return await self.client.request_json("GET", self._id_path(resource_id)) or {}

    async def delete(self, resource_id: str) -> bool:
        response = await self.client.request("DELETE", self._id_path(resource_id))
        return response.ok

    async def calculate_impact(self, resource_id: str) -> None:
        """Schedule impact calculation. The response body is ignored."""
        response = await self.client.request("POST", self._id_path(resource_id, "impact", "calculate"))
        raise_for_status(response)

    async def get_impact_status(self, resource_id: str) -> CalculationStatus:
        body = await self.client.request_json("GET", self._id_path(resource_id, "impact", "status"))
        if not isinstance(body, dict):
            return CalculationStatus.UNKNOWN
        return CalculationStatus.parse(body.get("status"))

    async def get_impact_report(
        self,
        resource_id: str,
        report_id: Optional[str] = None,
    ) -> Any:
        """Fetch a report by id, or the current report when no id is given."""
        if report_id:
            path = self._id_path(resource_id, "impact", "id", path_segment(report_id))
        else:
            path = self._id_path(resource_id, "impact", "current")
        return await self.client.request_json("GET", path)

    async def get_impact_history(self, resource_id: str) -> ImpactHistory:
        body = await self.client.request_json("GET", self._id_path(resource_id, "impact", "history"))
        return ImpactHistory.model_validate(body or {})

    async def delete_impact_report(self, resource_id: str, report_id: str) -> bool:
        response = await self.client.request(
            "DELETE",
            self._id_path(resource_id, "impact", "id", path_segment(report_id)),
        )
        return response.ok

    async def _put(self, resource_id: str, part: str, payload: Dict[str, Any]) -> None:
        response = await self.client.request("PUT", self._id_path(resource_id, part), data=payload)
        raise_for_status(response)
