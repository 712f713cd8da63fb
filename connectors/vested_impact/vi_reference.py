"""Reference data endpoints of the Vested Impact API.

Countries, currencies, industries, regions and the activities available
within an industry. Values sent in asset payloads must come from these lists.
Responses are accepted either wrapped (`{"countries": [...]}`) or as a bare
list.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
import asyncio
import logging

from connectors.vested_impact.vi_client import VIApiClient, path_segment
from connectors.vested_impact.vi_models import Activity, Country, Currency, Region

logger = logging.getLogger(__name__)


def _unwrap(body: Any, key: str) -> List[Any]:
    if isinstance(body, dict):
        body = body.get(key, [])
    return body if isinstance(body, list) else []


class ActivityCache:
    """Activities per industry, kept for the lifetime of one VIReferenceAPI."""

    def __init__(self):
        self._entries: Dict[str, List[Activity]] = {}

    def get(self, industry: str) -> Optional[List[Activity]]:
        return self._entries.get(industry)

    def put(self, industry: str, activities: List[Activity]) -> None:
        self._entries[industry] = activities

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, industry: str) -> bool:
        return industry in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class ReferenceSnapshot:
    """Countries, currencies and industries read together."""
    countries: List[Country] = field(default_factory=list)
    currencies: List[Currency] = field(default_factory=list)
    industries: List[str] = field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        return {
            "countries": len(self.countries),
            "currencies": len(self.currencies),
            "industries": len(self.industries),
            "sample_country": self.countries[0].model_dump() if self.countries else None,
            "sample_currency": self.currencies[0].model_dump() if self.currencies else None,
            "sample_industry": self.industries[0] if self.industries else None,
        }


class VIReferenceAPI:
    """Read-only reference data client."""

    prefix = "reference"

    def __init__(self, client: VIApiClient, cache: Optional[ActivityCache] = None):
        self.client = client
        self.activity_cache = cache if cache is not None else ActivityCache()

    async def _get(self, path: str) -> Any:
        return await self.client.request_json("GET", f"/{self.prefix}/{path}")

    async def fetch_countries(self) -> List[Country]:
        body = await self._get("countries")
        return [Country.model_validate(item) for item in _unwrap(body, "countries")]

    async def fetch_currencies(self) -> List[Currency]:
        body = await self._get("currencies")
        return [Currency.model_validate(item) for item in _unwrap(body, "currencies")]

    async def fetch_industries(self) -> List[str]:
        body = await self._get("industries")
        return [str(item) for item in _unwrap(body, "industries")]

    async def fetch_regions(self) -> List[Region]:
        body = await self._get("regions")
        return [Region.model_validate(item) for item in _unwrap(body, "regions")]

    async def fetch_activities(self, industry: str) -> List[Activity]:
        """Activities within an industry, served from the cache after the first read."""
        cached = self.activity_cache.get(industry)
        if cached is not None:
            return cached

        body = await self._get(f"activities/industry/{path_segment(industry)}")
        activities = [Activity.model_validate(item) for item in _unwrap(body, "activities")]
        self.activity_cache.put(industry, activities)
        logger.debug(f"Cached {len(activities)} activities for industry '{industry}'")
        return activities

    async def fetch_snapshot(self) -> ReferenceSnapshot:
        """Read countries, currencies and industries concurrently."""
        countries, currencies, industries = await asyncio.gather(
            self.fetch_countries(),
            self.fetch_currencies(),
            self.fetch_industries(),
        )
        return ReferenceSnapshot(countries=countries, currencies=currencies, industries=industries)
