"""Shared test fakes.

- FakeSession: aiohttp-like session driven by a handler function
- FakeImpactService: in-memory Vested Impact API used as a FakeSession handler
- FakeGateway: scripted ImpactResourceGateway for unit tests
"""

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import unquote

import pytest

# Add repo root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from compute.orchestrator import PollConfig
from connectors.http_transport import ResilientTransport, RetryConfig
from connectors.impact_base import (
    CalculationStatus,
    CreateOutcomeRef,
    HistoryEntryRef,
    ImpactResourceGateway,
    ResourceKind,
    SearchHit,
)
from connectors.vested_impact import VIApiClient, VIApiConfig

TEST_BASE_URL = "https://vi.test/v2"


# =============================================================================
# aiohttp-like session
# =============================================================================

class FakeResponse:
    def __init__(self, status: int, url: str, body: Any = None, headers: Optional[Dict[str, str]] = None):
        self.status = status
        self.url = url
        self.headers = headers or {"Content-Type": "application/json"}
        if body is None:
            self._text = ""
        elif isinstance(body, str):
            self._text = body
        else:
            self._text = json.dumps(body)

    async def text(self) -> str:
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Session whose responses come from `handler(method, url, body)`.

    The handler returns (status, body) or raises, e.g. an aiohttp.ClientError.
    """

    def __init__(self, handler: Callable[[str, str, Any], Tuple[int, Any]]):
        self.handler = handler
        self.requests: List[Dict[str, Any]] = []
        self.closed = False

    def request(self, method, url, headers=None, params=None, json=None, timeout=None):
        self.requests.append({"method": method, "url": url, "headers": headers or {}, "json": json})
        status, body = self.handler(method, url, json)
        return FakeResponse(status, url, body)

    async def close(self):
        self.closed = True


def scripted_handler(responses: List[Any]):
    """Handler returning `responses` in order; exceptions in the list are raised."""
    queue = list(responses)

    def handler(method, url, body):
        item = queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    return handler


# =============================================================================
# In-memory Vested Impact API
# =============================================================================

class FakeImpactService:
    """Minimal in-memory model of the asset, group and reference endpoints.

    Each calculate call walks the resource through `status_script`; the
    COMPLETED read stores a current report and appends a history entry.
    """

    def __init__(self, base_url: str = TEST_BASE_URL):
        self.base_url = base_url
        self.resources: Dict[str, Dict[str, Dict[str, Any]]] = {"asset": {}, "group": {}}
        self.payloads: Dict[str, Dict[str, Any]] = {}
        self.reports: Dict[str, Dict[str, Any]] = {}
        self.history: Dict[str, List[Dict[str, Any]]] = {}
        self.suggestions = [
            {"id": 11, "name": "Software development", "industry": "Software"},
            {"id": 12, "name": "Cloud hosting", "industry": "Software"},
            {"id": 13, "name": "IT consulting", "industry": "Software"},
        ]
        self.activities = {"Software": self.suggestions}
        self.status_script = ["PENDING", "ACTIVE", "COMPLETED"]
        self.group_create_status: Optional[int] = None
        self.failures: Dict[Tuple[str, str], List[int]] = {}
        self.calls: List[Tuple[str, str]] = []
        self._statuses: Dict[str, List[str]] = {}
        self._counter = 0

    # -- helpers for tests -----------------------------------------------

    def add_resource(self, kind: str, record: Dict[str, Any]) -> str:
        self.resources[kind][record["id"]] = dict(record)
        return record["id"]

    def add_report(self, resource_id: str, report_id: str, report: Optional[Dict[str, Any]] = None):
        report = report or {"id": report_id, "vestedImpactScore": 72.5}
        self.reports[resource_id] = report
        self.history.setdefault(resource_id, []).append({"id": report_id, "reportDate": "2024-05-01"})

    def fail(self, method: str, path: str, *statuses: int):
        """Answer the next calls to `method path` with `statuses`."""
        self.failures[(method, path)] = list(statuses)

    def count(self, method: str, suffix: str) -> int:
        return sum(1 for m, p in self.calls if m == method and p.endswith(suffix))

    # -- session handler -------------------------------------------------

    def handle(self, method: str, url: str, body: Any) -> Tuple[int, Any]:
        path = url[len(self.base_url):]
        self.calls.append((method, path))
        pending = self.failures.get((method, path))
        if pending:
            status = pending.pop(0)
            return status, {"statusCode": status, "error": "Injected failure"}

        parts = [unquote(p) for p in path.strip("/").split("/")]
        if parts[0] == "reference":
            return self._reference(parts[1:])
        kind = parts[0]
        if len(parts) == 1 and method == "POST":
            return self._create(kind, body)
        if parts[1] == "search":
            return self._search(kind, parts[3])
        resource_id = parts[2]
        if resource_id not in self.resources[kind]:
            return 404, {"statusCode": 404, "error": "Not Found"}
        return self._resource(kind, resource_id, method, parts[3:], body)

    def _next_id(self, kind: str) -> str:
        self._counter += 1
        return f"{kind}-{self._counter}"

    def _create(self, kind: str, body: Dict[str, Any]) -> Tuple[int, Any]:
        if kind == "asset":
            record = dict(body, id=self._next_id("asset"))
            self.resources["asset"][record["id"]] = record
            return 201, {"asset": record, "suggestedActivities": self.suggestions}
        if self.group_create_status is not None:
            return self.group_create_status, {"statusCode": self.group_create_status, "error": "Conflict"}
        record = dict(body, id=self._next_id("group"))
        self.resources["group"][record["id"]] = record
        return 201, record

    def _search(self, kind: str, name: str) -> Tuple[int, Any]:
        results = [
            {k: v for k, v in record.items() if k in ("id", "name", "industry", "owner")}
            for record in self.resources[kind].values()
            if name.lower() in str(record.get("name", "")).lower()
        ]
        return 200, {"results": results, "query": name}

    def _resource(self, kind, resource_id, method, rest, body) -> Tuple[int, Any]:
        if not rest:
            if method == "DELETE":
                del self.resources[kind][resource_id]
                return 200, {"success": True}
            return 200, self.resources[kind][resource_id]
        if method == "PUT":
            self.payloads.setdefault(resource_id, {})[rest[0]] = body
            return 200, body
        if rest[:2] == ["impact", "calculate"]:
            self._statuses[resource_id] = list(self.status_script)
            return 202, {"status": "PENDING"}
        if rest[:2] == ["impact", "status"]:
            script = self._statuses.get(resource_id) or ["UNKNOWN"]
            status = script.pop(0) if len(script) > 1 else script[0]
            if status == "COMPLETED" and resource_id not in self.reports:
                self.add_report(resource_id, f"rep-{resource_id}-{len(self.history.get(resource_id, []))}")
            return 200, {"status": status}
        if rest[:2] == ["impact", "current"]:
            if resource_id in self.reports:
                return 200, self.reports[resource_id]
            return 404, {"statusCode": 404, "error": "No impact report"}
        if rest[:2] == ["impact", "history"]:
            return 200, {"reports": list(self.history.get(resource_id, []))}
        if rest[:2] == ["impact", "id"] and method == "DELETE":
            report_id = rest[2]
            entries = self.history.get(resource_id, [])
            self.history[resource_id] = [e for e in entries if e["id"] != report_id]
            if self.reports.get(resource_id, {}).get("id") == report_id:
                del self.reports[resource_id]
            return 200, {"success": True}
        return 404, {"statusCode": 404, "error": "Not Found"}

    def _reference(self, parts: List[str]) -> Tuple[int, Any]:
        if parts[0] == "countries":
            return 200, {"countries": [{"code": "US", "name": "United States"}, {"code": "GB", "name": "United Kingdom"}]}
        if parts[0] == "currencies":
            return 200, {"currencies": [{"code": "USD", "name": "US Dollar", "symbol": "$"}]}
        if parts[0] == "industries":
            return 200, {"industries": ["Software", "Agriculture"]}
        if parts[0] == "regions":
            return 200, {"regions": [{"name": "Europe", "countries": [{"code": "GB", "name": "United Kingdom"}]}]}
        if parts[0] == "activities":
            return 200, {"activities": self.activities.get(parts[2], [])}
        return 404, {"statusCode": 404}


def make_vi_client(handler, max_attempts: int = 2) -> VIApiClient:
    """VIApiClient over a FakeSession, without backoff delays."""
    retry = RetryConfig(max_attempts=max_attempts, base_delay=0)
    transport = ResilientTransport(retry_config=retry, session=FakeSession(handler))
    return VIApiClient(
        VIApiConfig(api_key="test-key", base_url=TEST_BASE_URL, retry_config=retry),
        transport=transport,
    )


# =============================================================================
# Scripted gateway
# =============================================================================

class FakeGateway(ImpactResourceGateway):
    """ImpactResourceGateway with scripted answers and a call log."""

    def __init__(
        self,
        kind: ResourceKind = ResourceKind.ASSET,
        create_outcome: Optional[CreateOutcomeRef] = None,
        create_error: Optional[Exception] = None,
        search_hits: Optional[List[SearchHit]] = None,
        search_error: Optional[Exception] = None,
        statuses: Optional[List[str]] = None,
        report: Any = None,
        report_error: Optional[Exception] = None,
        history: Optional[List[str]] = None,
        history_error: Optional[Exception] = None,
        delete_results: Optional[Dict[str, Any]] = None,
        push_error: Optional[Exception] = None,
    ):
        self.kind = kind
        self.create_outcome = create_outcome
        self.create_error = create_error
        self.search_hits = search_hits or []
        self.search_error = search_error
        self.statuses = list(statuses or ["COMPLETED"])
        self.report = report
        self.report_error = report_error
        self.history = list(history or [])
        self.history_error = history_error
        self.delete_results = delete_results or {}
        self.push_error = push_error
        self.calls: List[Tuple[str, Any]] = []
        self.pushed: List[Dict[str, Any]] = []

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    async def create(self, descriptor):
        self.calls.append(("create", descriptor.get("name")))
        if self.create_error:
            raise self.create_error
        return self.create_outcome or CreateOutcomeRef(already_exists=True)

    async def search(self, name):
        self.calls.append(("search", name))
        if self.search_error:
            raise self.search_error
        return self.search_hits

    def matches(self, hit, descriptor):
        if self.kind is ResourceKind.ASSET:
            return hit.name == descriptor.get("name") and hit.industry == descriptor.get("industry")
        return hit.name == descriptor.get("name")

    async def push(self, resource_id, payload):
        self.calls.append(("push", resource_id))
        if self.push_error:
            raise self.push_error
        self.pushed.append(payload)

    async def trigger(self, resource_id):
        self.calls.append(("trigger", resource_id))

    async def get_status(self, resource_id):
        self.calls.append(("get_status", resource_id))
        value = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        return CalculationStatus.parse(value)

    async def get_report(self, resource_id):
        self.calls.append(("get_report", resource_id))
        if self.report_error:
            raise self.report_error
        return self.report

    async def list_history(self, resource_id):
        self.calls.append(("list_history", resource_id))
        if self.history_error:
            raise self.history_error
        return [HistoryEntryRef(id=report_id) for report_id in self.history]

    async def delete_history_entry(self, resource_id, report_id):
        self.calls.append(("delete_history_entry", report_id))
        result = self.delete_results.get(report_id, True)
        if isinstance(result, Exception):
            raise result
        return result


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def impact_service():
    return FakeImpactService()


@pytest.fixture
def vi_client(impact_service):
    return make_vi_client(impact_service.handle)


@pytest.fixture
def fast_poll():
    return PollConfig(interval=0, max_attempts=20, timeout_seconds=5)


@pytest.fixture
def acme_asset():
    return {
        "name": "Acme",
        "description": "Acme builds software",
        "industry": "Software",
        "hqCountryCode": "US",
        "numEmployees": 120,
    }


@pytest.fixture
def acme_basics(acme_asset):
    return dict(acme_asset, currency="USD", revenue=5_000_000, revenueGrowth=0.12)
