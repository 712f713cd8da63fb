"""Vested Impact API Data Models.

Pydantic models for request payloads and the response shapes this package
reads. Impact report bodies are large nested documents and stay plain dicts.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from connectors.impact_base import SuggestedActivity


# =============================================================================
# Asset Models
# =============================================================================

class AssetCreateInput(BaseModel):
    """Create-time payload for an asset."""
    name: str
    description: str
    industry: str
    hqCountryCode: str
    numEmployees: Union[int, float]


class AssetBasics(BaseModel):
    """Basics payload (PUT /asset/id/{id}/basics)."""
    currency: str
    description: str
    hqCountryCode: str
    industry: str
    name: str
    numEmployees: Union[int, float]
    revenue: float
    revenueGrowth: float


class BreakdownItem(BaseModel):
    """One activity/country allocation row."""
    activityId: int
    countryCode: str = Field(..., min_length=2, max_length=2)
    weight: float = Field(..., ge=0)


class AssetBreakdown(BaseModel):
    """Breakdown payload (PUT /asset/id/{id}/breakdown)."""
    breakdown: List[BreakdownItem] = Field(default_factory=list)


class AssetRecord(BaseModel):
    """Asset as returned by the service."""
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None
    industry: Optional[str] = None


class AssetCreateResponse(BaseModel):
    """Response of POST /asset."""
    model_config = ConfigDict(extra="allow")

    asset: AssetRecord
    suggestedActivities: List[SuggestedActivity] = Field(default_factory=list)


class AssetSearchResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    industry: Optional[str] = None


class AssetSearchResults(BaseModel):
    """Response of GET /asset/search/name/{name}."""
    model_config = ConfigDict(extra="ignore")

    results: List[AssetSearchResult] = Field(default_factory=list)
    query: Optional[str] = None


# =============================================================================
# Asset Group Models
# =============================================================================

class AssetGroupCreateInput(BaseModel):
    """Create-time payload for an asset group."""
    name: str
    description: str
    owner: str


class HoldingItem(BaseModel):
    """One member allocation row of a group."""
    id: str
    weight: float = Field(..., ge=0)


class AssetGroupHoldings(BaseModel):
    """Holdings payload (PUT /group/id/{id}/holdings)."""
    holdings: List[HoldingItem] = Field(default_factory=list)


class AssetGroupRecord(BaseModel):
    """Asset group as returned by the service."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    owner: Optional[str] = None


class GroupSearchResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    owner: Optional[str] = None


class GroupSearchResults(BaseModel):
    """Response of GET /group/search/name/{name}."""
    model_config = ConfigDict(extra="ignore")

    results: List[GroupSearchResult] = Field(default_factory=list)
    query: Optional[str] = None


# =============================================================================
# Impact Models
# =============================================================================

class ImpactHistoryEntry(BaseModel):
    """Summary of one historical report."""
    model_config = ConfigDict(extra="allow")

    id: str
    reportDate: Optional[str] = None
    vestedImpactScore: Optional[float] = None
    vestedImpactRating: Optional[str] = None


class ImpactHistory(BaseModel):
    """Response of GET .../impact/history."""
    model_config = ConfigDict(extra="ignore")

    reports: List[ImpactHistoryEntry] = Field(default_factory=list)


# =============================================================================
# Reference Data Models
# =============================================================================

class Country(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str
    name: str


class Currency(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str
    name: Optional[str] = None
    symbol: Optional[str] = None


class Region(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    countries: List[Country] = Field(default_factory=list)


class Activity(BaseModel):
    """Activity within an industry."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    industry: Optional[str] = None
