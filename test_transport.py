"""
Resilient Transport Tests

Validates retry behaviour of the HTTP layer:
1. Retryable statuses are retried up to max_attempts
2. The last response is returned once attempts are exhausted
3. Network errors are retried and re-raised on the last attempt
4. Backoff is linear in the attempt number
5. The VI client maps statuses to its error types
6. Resource get/delete endpoints for assets and groups
"""

import asyncio

import aiohttp
import pytest

from conftest import FakeSession, TEST_BASE_URL, make_vi_client, scripted_handler
from connectors.http_transport import ResilientTransport, RetryConfig
from core.config import DEFAULT_RETRY_STATUSES
from core.errors import TransientTransportError


URL = f"{TEST_BASE_URL}/asset/id/a1"


def _transport(responses, max_attempts=4):
    session = FakeSession(scripted_handler(responses))
    transport = ResilientTransport(RetryConfig(max_attempts=max_attempts, base_delay=0), session=session)
    return transport, session


class TestRetryConfig:

    def test_default_retry_statuses_include_400(self):
        assert DEFAULT_RETRY_STATUSES == (400, 429, 500, 503, 504)
        assert RetryConfig().is_retryable(400)
        assert not RetryConfig().is_retryable(404)

    def test_linear_backoff(self):
        config = RetryConfig(base_delay=1.0, max_delay=30.0)
        assert [config.get_delay(n) for n in (1, 2, 3)] == [1.0, 2.0, 3.0]

    def test_backoff_capped(self):
        config = RetryConfig(base_delay=10.0, max_delay=25.0)
        assert config.get_delay(5) == 25.0


class TestResilientTransport:

    def test_returns_first_success(self):
        transport, session = _transport([(200, {"ok": True})])
        response = asyncio.run(transport.call("GET", URL))
        assert response.ok
        assert response.json() == {"ok": True}
        assert response.attempts == 1
        assert len(session.requests) == 1

    def test_retries_retryable_status_then_succeeds(self):
        transport, session = _transport([(503, None), (429, None), (200, {"id": "a1"})])
        response = asyncio.run(transport.call("GET", URL))
        assert response.status == 200
        assert response.attempts == 3
        assert len(session.requests) == 3

    def test_exhaustion_returns_last_response(self):
        transport, session = _transport([(500, {"error": "boom"})] * 4)
        response = asyncio.run(transport.call("GET", URL))
        assert response.status == 500
        assert response.attempts == 4
        assert len(session.requests) == 4

    def test_non_retryable_status_returned_immediately(self):
        transport, session = _transport([(404, {"error": "missing"})])
        response = asyncio.run(transport.call("GET", URL))
        assert response.status == 404
        assert len(session.requests) == 1

    def test_network_error_retried(self):
        transport, session = _transport([aiohttp.ClientConnectionError("reset"), (200, {})])
        response = asyncio.run(transport.call("GET", URL))
        assert response.ok
        assert len(session.requests) == 2

    def test_network_error_on_last_attempt_raises(self):
        transport, _ = _transport([asyncio.TimeoutError()] * 2, max_attempts=2)
        with pytest.raises(TransientTransportError) as exc_info:
            asyncio.run(transport.call("GET", URL))
        assert exc_info.value.url == URL

    def test_per_call_attempt_override(self):
        transport, session = _transport([(500, None), (500, None)])
        response = asyncio.run(transport.call("GET", URL, max_attempts=1))
        assert response.status == 500
        assert len(session.requests) == 1

    def test_linear_sleep_between_attempts(self, monkeypatch):
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)

        monkeypatch.setattr("connectors.http_transport.asyncio.sleep", fake_sleep)
        session = FakeSession(scripted_handler([(500, None), (500, None), (500, None), (200, {})]))
        transport = ResilientTransport(RetryConfig(max_attempts=4, base_delay=1.5), session=session)
        asyncio.run(transport.call("GET", URL))
        assert delays == [1.5, 3.0, 4.5]

    def test_retry_counted_in_metrics(self):
        from core.observability.metrics import MetricsCollector
        before = MetricsCollector.instance().get_summary()["transport"]["retries"]
        transport, _ = _transport([(503, None), (200, {})])
        asyncio.run(transport.call("GET", URL))
        after = MetricsCollector.instance().get_summary()["transport"]["retries"]
        assert after == before + 1

    def test_injected_session_not_closed(self):
        transport, session = _transport([])
        asyncio.run(transport.close())
        assert session.closed is False


class TestVIApiClient:

    def test_api_key_header_attached(self):
        client = make_vi_client(scripted_handler([(200, {"status": "PENDING"})]))
        asyncio.run(client.request_json("GET", "/asset/id/a1/impact/status"))
        request = client.transport._session.requests[0]
        assert request["headers"]["api-key"] == "test-key"
        assert request["url"] == f"{TEST_BASE_URL}/asset/id/a1/impact/status"

    def test_status_errors_mapped(self):
        from connectors.vested_impact import VIAuthenticationError, VIConflictError, VINotFoundError, VIApiError

        cases = [
            (401, VIAuthenticationError),
            (404, VINotFoundError),
            (409, VIConflictError),
            (422, VIApiError),
        ]
        for status, error_type in cases:
            client = make_vi_client(scripted_handler([(status, {"error": "x"})]))
            with pytest.raises(error_type) as exc_info:
                asyncio.run(client.request_json("GET", "/asset/id/a1"))
            assert exc_info.value.status_code == status

    def test_missing_api_key_is_configuration_error(self):
        from connectors.vested_impact import VIApiClient, VIApiConfig
        from core.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            VIApiClient(VIApiConfig(api_key=""))

    def test_search_name_is_path_encoded(self):
        from connectors.vested_impact import VIAssetAPI

        client = make_vi_client(scripted_handler([(200, {"results": []})]))
        asyncio.run(VIAssetAPI(client).search_assets("Acme & Sons/UK"))
        url = client.transport._session.requests[0]["url"]
        assert url.endswith("/asset/search/name/Acme%20%26%20Sons%2FUK")


class TestResourceEndpoints:
    """GET and DELETE on /{prefix}/id/{id} for both resource kinds."""

    def test_get_and_delete_asset(self, impact_service, vi_client):
        from connectors.vested_impact import VIAssetAPI

        impact_service.add_resource("asset", {"id": "a1", "name": "Acme", "industry": "Software"})
        api = VIAssetAPI(vi_client)

        assert asyncio.run(api.get("a1"))["name"] == "Acme"
        assert asyncio.run(api.delete("a1")) is True
        assert impact_service.calls[-1] == ("DELETE", "/asset/id/a1")
        assert "a1" not in impact_service.resources["asset"]

    def test_delete_unknown_group_is_false(self, impact_service, vi_client):
        from connectors.vested_impact import VIGroupAPI, VINotFoundError

        api = VIGroupAPI(vi_client)
        assert asyncio.run(api.delete("missing")) is False
        with pytest.raises(VINotFoundError):
            asyncio.run(api.get("missing"))


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
