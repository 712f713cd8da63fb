"""Upstream data platform client.

Reads company profiles and company lists from the platform that feeds the
report pipeline, and maps them to the descriptor/basics/breakdown and
descriptor/holdings payloads the pipeline accepts.

Matching question ids used for asset basics:
    2001  number of employees
    2002  currency (default USD)
    2003  revenue
    2004  revenue growth
    2005  activity breakdown, a JSON encoded list
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
import asyncio
import json
import logging
import math

from connectors.http_transport import ResilientTransport, RetryConfig, TransportResponse
from core.config import Settings
from core.errors import ConfigurationError, ReportError

logger = logging.getLogger(__name__)


QUESTION_EMPLOYEES = 2001
QUESTION_CURRENCY = 2002
QUESTION_REVENUE = 2003
QUESTION_REVENUE_GROWTH = 2004
QUESTION_BREAKDOWN = 2005

DEFAULT_INDUSTRY = "General"
DEFAULT_COUNTRY = "US"
DEFAULT_CURRENCY = "USD"


class SourcePlatformError(ReportError):
    """The upstream platform returned an error or an unusable body."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class SourcePlatformConfig:
    base_url: str
    token: str
    retry_config: RetryConfig = field(default_factory=RetryConfig)
    timeout_seconds: int = 30

    @classmethod
    def from_settings(cls, settings: Settings) -> "SourcePlatformConfig":
        if not settings.source_base_url or not settings.source_token:
            raise ConfigurationError(
                "SOURCE_PLATFORM_BASE_URL and SOURCE_PLATFORM_TOKEN must be set"
            )
        return cls(
            base_url=settings.source_base_url,
            token=settings.source_token,
            retry_config=RetryConfig(
                max_attempts=settings.max_attempts,
                base_delay=settings.retry_base_delay,
                retry_on_status=settings.retry_on_status,
            ),
            timeout_seconds=settings.timeout_seconds,
        )


@dataclass
class AssetProfile:
    """Inputs for generate_asset_report built from a company profile."""
    descriptor: Dict[str, Any]
    basics: Dict[str, Any]
    breakdown: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class GroupProfile:
    """Inputs for generate_group_report built from a company list."""
    descriptor: Dict[str, Any]
    holdings: List[Dict[str, Any]] = field(default_factory=list)


def _number(value: Any, default: float) -> float:
    """Numeric value of `value`; missing, unparsable, NaN and zero give `default`."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or number == 0:
        return default
    return number


def _whole(number: float) -> Any:
    return int(number) if float(number).is_integer() else number


def _question_value(questions: Any, question_id: int) -> Any:
    if not isinstance(questions, list):
        return None
    for question in questions:
        if isinstance(question, dict) and question.get("id") == question_id:
            responses = question.get("responses") or []
            if responses and isinstance(responses[0], dict):
                return responses[0].get("value")
            return None
    return None


def _first(items: Any, key: str) -> Any:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0].get(key)
    return None


def parse_breakdown(raw: Any, default_country: str, profile_id: str = "") -> List[Dict[str, Any]]:
    """Decode the JSON breakdown answer. Unparsable input gives an empty list."""
    if not raw:
        return []
    try:
        parsed = json.loads(raw) if isinstance(raw, str) else raw
    except ValueError as e:
        logger.warning(f"Failed to parse breakdown for company {profile_id}: {e}")
        return []
    if not isinstance(parsed, list):
        logger.warning(f"Breakdown for company {profile_id} is not a list, ignoring")
        return []

    items = []
    for item in parsed:
        if not isinstance(item, dict):
            continue
        activity = _number(item.get("activityId"), 0)
        items.append({
            "activityId": _whole(activity),
            "countryCode": item.get("countryCode") or default_country,
            "weight": _number(item.get("weight"), 1),
        })
    return items


def build_asset_profile(profile_id: str, company: Dict[str, Any], questions: Any) -> AssetProfile:
    """Map the raw company and matching-question bodies to pipeline inputs."""
    industry = _first(company.get("sectors"), "name") or DEFAULT_INDUSTRY
    country = _first(company.get("locations"), "country_code") or DEFAULT_COUNTRY
    name = company.get("name") or "Unknown Company"
    description = company.get("about") or ""
    num_employees = _whole(_number(_question_value(questions, QUESTION_EMPLOYEES), 0))

    descriptor = {
        "name": name,
        "description": description,
        "industry": industry,
        "hqCountryCode": country,
        "numEmployees": num_employees,
    }
    basics = {
        "currency": _question_value(questions, QUESTION_CURRENCY) or DEFAULT_CURRENCY,
        "revenue": _number(_question_value(questions, QUESTION_REVENUE), 0),
        "revenueGrowth": _number(_question_value(questions, QUESTION_REVENUE_GROWTH), 0),
        "description": description,
        "hqCountryCode": country,
        "industry": industry,
        "name": name,
        "numEmployees": num_employees,
    }
    breakdown = parse_breakdown(
        _question_value(questions, QUESTION_BREAKDOWN), country, profile_id
    )
    return AssetProfile(descriptor=descriptor, basics=basics, breakdown=breakdown)


def build_group_profile(data: Any) -> GroupProfile:
    """Map a company-list body to pipeline inputs.

    Raises:
        SourcePlatformError: If `group` or `holdings` is missing
    """
    if not isinstance(data, dict) or not data.get("group") or not data.get("holdings"):
        raise SourcePlatformError("Invalid cohort response structure")

    group = data["group"]
    descriptor = {
        "description": group.get("description") or "",
        "name": group.get("name") or "Default Asset Group",
        "owner": group.get("owner") or "Default Group Owner",
    }
    holdings = [
        {"id": str(h.get("id")), "weight": _number(h.get("weight"), 0)}
        for h in data["holdings"]
        if isinstance(h, dict)
    ]
    return GroupProfile(descriptor=descriptor, holdings=holdings)


class SourcePlatformClient:
    """Read-only client for the upstream data platform.

    Usage:
        async with SourcePlatformClient(SourcePlatformConfig.from_settings(settings)) as client:
            profile = await client.fetch_asset_profile("1234")
    """

    def __init__(self, config: SourcePlatformConfig, transport: Optional[ResilientTransport] = None):
        self.config = config
        self.transport = transport or ResilientTransport(
            retry_config=config.retry_config,
            timeout_seconds=config.timeout_seconds,
        )

    async def __aenter__(self) -> "SourcePlatformClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        await self.transport.close()

    def _url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{path}"

    async def _get(self, path: str, label: str) -> TransportResponse:
        response = await self.transport.call(
            "GET",
            self._url(path),
            headers={"authorization": self.config.token},
        )
        if not response.ok:
            raise SourcePlatformError(f"{label} fetch failed: {response.status}", response.status)
        return response

    @staticmethod
    def _decode(response: TransportResponse, label: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise SourcePlatformError(f"{label} response is not valid JSON: {e}", response.status)

    async def fetch_asset_profile(self, profile_id: str) -> AssetProfile:
        """Read company, assessments and matching answers concurrently."""
        company_res, _assessments_res, matching_res = await asyncio.gather(
            self._get(f"companies/{profile_id}/", "Company"),
            self._get(f"companies/{profile_id}/assessments/", "Assessments"),
            self._get(f"matching/questions-with-responses/{profile_id}", "Matching"),
        )
        company = self._decode(company_res, "Company")
        if not isinstance(company, dict):
            raise SourcePlatformError("Company response is not an object", company_res.status)
        questions = self._decode(matching_res, "Matching")
        return build_asset_profile(profile_id, company, questions)

    async def fetch_group_profile(self, list_id: str) -> GroupProfile:
        response = await self._get(f"user/company-lists/{list_id}/companies", "Cohort")
        return build_group_profile(self._decode(response, "Cohort"))
