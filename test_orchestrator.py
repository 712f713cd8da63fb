"""
Impact Compute Orchestrator Tests

1. Poll loop reads status until terminal, one read per interval
2. FAILED raises ComputeFailure
3. Attempt cap and deadline raise PollTimeoutError
4. Cancellation event raises PollCancelledError
5. History purge is best-effort; existing reports are checked for error shapes
"""

import asyncio

import pytest

from compute import ImpactComputeOrchestrator, PollConfig, is_well_formed_report
from conftest import FakeGateway
from connectors.impact_base import CalculationStatus
from core.errors import ComputeFailure, PollCancelledError, PollTimeoutError


FAST = PollConfig(interval=0, max_attempts=10, timeout_seconds=5)


class TestPollUntilTerminal:

    def test_pending_active_completed_takes_three_reads(self):
        gateway = FakeGateway(statuses=["PENDING", "ACTIVE", "COMPLETED"])
        status = asyncio.run(ImpactComputeOrchestrator(gateway, FAST).poll_until_terminal("a1"))
        assert status is CalculationStatus.COMPLETED
        assert gateway.count("get_status") == 3

    def test_unknown_status_values_keep_polling(self):
        gateway = FakeGateway(statuses=["QUEUED", "UNKNOWN", "COMPLETED"])
        status = asyncio.run(ImpactComputeOrchestrator(gateway, FAST).poll_until_terminal("a1"))
        assert status is CalculationStatus.COMPLETED
        assert gateway.count("get_status") == 3

    def test_attempt_cap_raises_poll_timeout(self):
        gateway = FakeGateway(statuses=["PENDING"])
        config = PollConfig(interval=0, max_attempts=4, timeout_seconds=None)
        with pytest.raises(PollTimeoutError) as exc_info:
            asyncio.run(ImpactComputeOrchestrator(gateway, config).poll_until_terminal("a1"))
        assert exc_info.value.attempts == 4
        assert exc_info.value.last_status == "PENDING"
        assert isinstance(exc_info.value, TimeoutError)
        assert gateway.count("get_status") == 4

    def test_deadline_raises_poll_timeout(self):
        gateway = FakeGateway(statuses=["ACTIVE"])
        config = PollConfig(interval=0.01, max_attempts=None, timeout_seconds=0.03)
        with pytest.raises(PollTimeoutError):
            asyncio.run(ImpactComputeOrchestrator(gateway, config).poll_until_terminal("a1"))

    def test_cancel_event_stops_polling(self):
        gateway = FakeGateway(statuses=["PENDING"])
        config = PollConfig(interval=0.05, max_attempts=None, timeout_seconds=None)

        async def scenario():
            cancel = asyncio.Event()
            orchestrator = ImpactComputeOrchestrator(gateway, config)
            task = asyncio.ensure_future(orchestrator.poll_until_terminal("a1", cancel))
            await asyncio.sleep(0.12)
            cancel.set()
            return await task

        with pytest.raises(PollCancelledError):
            asyncio.run(scenario())
        assert gateway.count("get_status") >= 1

    def test_on_status_callback_sees_every_read(self):
        seen = []
        gateway = FakeGateway(statuses=["PENDING", "COMPLETED"])
        orchestrator = ImpactComputeOrchestrator(gateway, FAST, on_status=lambda s, n: seen.append((s.value, n)))
        asyncio.run(orchestrator.poll_until_terminal("a1"))
        assert seen == [("PENDING", 1), ("COMPLETED", 2)]


class TestCompute:

    def test_push_trigger_poll_in_order(self):
        gateway = FakeGateway(statuses=["PENDING", "COMPLETED"])
        payload = {"holdings": [{"id": "a", "weight": 1.0}]}
        status = asyncio.run(ImpactComputeOrchestrator(gateway, FAST).compute("g1", payload))
        assert status is CalculationStatus.COMPLETED
        assert [name for name, _ in gateway.calls] == ["push", "trigger", "get_status", "get_status"]
        assert gateway.pushed == [payload]

    def test_failed_status_raises_compute_failure(self):
        gateway = FakeGateway(statuses=["ACTIVE", "FAILED"])
        with pytest.raises(ComputeFailure) as exc_info:
            asyncio.run(ImpactComputeOrchestrator(gateway, FAST).compute("a1", {}))
        assert exc_info.value.resource_id == "a1"


class TestPurgeHistory:

    def test_deletes_every_entry(self):
        gateway = FakeGateway(history=["r1", "r2", "r3"])
        result = asyncio.run(ImpactComputeOrchestrator(gateway, FAST).purge_history("a1"))
        assert result.deleted == ["r1", "r2", "r3"]
        assert result.warnings == []

    def test_failures_become_warnings(self):
        gateway = FakeGateway(
            history=["r1", "r2", "r3"],
            delete_results={"r1": False, "r2": RuntimeError("boom")},
        )
        result = asyncio.run(ImpactComputeOrchestrator(gateway, FAST).purge_history("a1"))
        assert result.deleted == ["r3"]
        assert [w.report_id for w in result.warnings] == ["r1", "r2"]
        assert "boom" in str(result.warnings[1])
        assert gateway.count("delete_history_entry") == 3

    def test_list_failure_is_not_raised(self):
        gateway = FakeGateway(history_error=RuntimeError("history down"))
        result = asyncio.run(ImpactComputeOrchestrator(gateway, FAST).purge_history("a1"))
        assert result.deleted == []
        assert gateway.count("delete_history_entry") == 0


class TestFetchExistingReport:

    def test_well_formed_report_returned(self):
        gateway = FakeGateway(report={"id": "r1", "vestedImpactScore": 70})
        report = asyncio.run(ImpactComputeOrchestrator(gateway, FAST).fetch_existing_report("a1"))
        assert report["id"] == "r1"

    @pytest.mark.parametrize("report", [
        None,
        {},
        {"error": "Not Found"},
        {"statusCode": 404, "message": "no report"},
        ["not", "a", "dict"],
    ])
    def test_error_shapes_rejected(self, report):
        assert is_well_formed_report(report) is False

    def test_fetch_error_returns_none(self):
        gateway = FakeGateway(report_error=RuntimeError("down"))
        assert asyncio.run(ImpactComputeOrchestrator(gateway, FAST).fetch_existing_report("a1")) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
