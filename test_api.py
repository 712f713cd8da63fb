"""
API Tests

Drives the FastAPI app through TestClient with the settings and client
dependencies overridden to use the in-memory impact service.

1. POST /reports/asset and /reports/group return the pipeline result
2. ValidationError -> 422, ReconciliationError -> 502, missing key -> 500
3. Source endpoints map upstream failures to 502
4. Health and metrics endpoints
"""

import pytest
from fastapi.testclient import TestClient

from api.routes import reports
from api.server import create_app
from connectors.source_platform import AssetProfile, SourcePlatformError
from core.config import Settings


TEST_SETTINGS = Settings(
    api_key="test-key",
    poll_interval=0,
    poll_timeout=5,
    poll_max_attempts=20,
)


class StubSourceClient:
    """Source platform client returning a fixed profile or raising."""

    def __init__(self, profile=None, error=None):
        self.profile = profile
        self.error = error

    async def fetch_asset_profile(self, profile_id):
        if self.error:
            raise self.error
        return self.profile

    async def fetch_group_profile(self, list_id):
        if self.error:
            raise self.error
        return self.profile


@pytest.fixture
def app(vi_client):
    app = create_app()

    async def override_client():
        yield vi_client

    app.dependency_overrides[reports.get_settings] = lambda: TEST_SETTINGS
    app.dependency_overrides[reports.get_api_client] = override_client
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


class TestAssetEndpoint:

    def test_asset_report_success(self, client, impact_service, acme_asset, acme_basics):
        response = client.post("/reports/asset", json={"asset": acme_asset, "basics": acme_basics})
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["kind"] == "asset"
        assert body["created"] is True
        assert body["id"] in impact_service.resources["asset"]

    def test_missing_fields_is_422(self, client, impact_service):
        response = client.post("/reports/asset", json={"asset": {"name": "Acme"}, "basics": {}})
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert "Missing required fields" in detail["message"]
        assert "industry" in detail["errors"]["asset"]
        assert impact_service.calls == []

    def test_wrong_typed_basics_is_422_and_nothing_created(self, client, impact_service,
                                                         acme_asset, acme_basics):
        basics = dict(acme_basics, currency=840)
        response = client.post("/reports/asset", json={"asset": acme_asset, "basics": basics})
        assert response.status_code == 422
        assert response.json()["detail"]["errors"] == {"basics": ["currency"]}
        assert impact_service.resources["asset"] == {}

    def test_unresolvable_create_is_502(self, client, impact_service, acme_asset, acme_basics):
        impact_service.fail("POST", "/asset", 422)
        response = client.post("/reports/asset", json={"asset": acme_asset, "basics": acme_basics})
        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["reason"] == "NO_MATCH"

    def test_partial_result_is_200(self, client, impact_service, acme_asset, acme_basics):
        impact_service.status_script = ["FAILED"]
        response = client.post("/reports/asset", json={"asset": acme_asset, "basics": acme_basics})
        assert response.status_code == 200
        assert response.json()["status"] == "partial"


class TestGroupEndpoint:

    def test_group_report_success(self, client, impact_service):
        response = client.post("/reports/group", json={
            "group": {"name": "Fund I", "description": "d", "owner": "o"},
            "holdings": {"holdings": [{"id": "a", "weight": 2}, {"id": "b", "weight": 2}]},
        })
        assert response.status_code == 200
        group_id = response.json()["id"]
        assert impact_service.payloads[group_id]["holdings"]["holdings"][0]["weight"] == 0.5

    def test_zero_weights_is_422(self, client):
        response = client.post("/reports/group", json={
            "group": {"name": "Fund I", "description": "d", "owner": "o"},
            "holdings": [{"id": "a", "weight": 0}],
        })
        assert response.status_code == 422
        assert response.json()["detail"]["errors"] == {"holdings": ["weight"]}


class TestSourceEndpoints:

    def test_asset_from_source_profile(self, app, impact_service, acme_asset, acme_basics):
        profile = AssetProfile(descriptor=acme_asset, basics=acme_basics, breakdown=[])

        async def override_source():
            yield StubSourceClient(profile=profile)

        app.dependency_overrides[reports.get_source_client] = override_source
        response = TestClient(app).post("/reports/asset/source/42")
        assert response.status_code == 200
        assert response.json()["status"] == "success"

    def test_source_failure_is_502(self, app):
        async def override_source():
            yield StubSourceClient(error=SourcePlatformError("Company fetch failed: 404", 404))

        app.dependency_overrides[reports.get_source_client] = override_source
        response = TestClient(app).post("/reports/group/source/9")
        assert response.status_code == 502
        assert "Company fetch failed" in response.json()["detail"]

    def test_source_not_configured_is_500(self, app):
        response = TestClient(app).post("/reports/asset/source/42")
        assert response.status_code == 500
        assert "SOURCE_PLATFORM_BASE_URL" in response.json()["detail"]


class TestConfiguration:

    def test_missing_api_key_is_500(self, monkeypatch, acme_asset, acme_basics):
        monkeypatch.delenv("VESTED_API_KEY", raising=False)
        response = TestClient(create_app()).post(
            "/reports/asset", json={"asset": acme_asset, "basics": acme_basics},
        )
        assert response.status_code == 500
        assert "VESTED_API_KEY" in response.json()["detail"]


class TestHealthAndMetrics:

    def test_health_degraded_without_key(self, client, monkeypatch):
        monkeypatch.delenv("VESTED_API_KEY", raising=False)
        body = client.get("/health").json()
        assert body["status"] == "degraded"
        assert body["services"]["impact_api"] == "missing_api_key"

    def test_health_with_key(self, client, monkeypatch):
        monkeypatch.setenv("VESTED_API_KEY", "k")
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["services"]["source_platform"] == "not_configured"

    def test_probes(self, client):
        assert client.get("/ready").json() == {"status": "ready"}
        assert client.get("/live").json() == {"status": "alive"}

    def test_metrics_summary(self, client, acme_asset, acme_basics):
        client.post("/reports/asset", json={"asset": acme_asset, "basics": acme_basics})
        summary = client.get("/reports/metrics").json()
        assert summary["reports"]["started"] >= 1
        assert "transport" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
