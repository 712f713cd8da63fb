"""Impact Compute Orchestrator.

Drives one resource through the remote calculation state machine:

    CREATED -> push -> COMPUTE_TRIGGERED -> polling -> COMPLETED | FAILED

The service exposes no completion callback, so the terminal status is
observed by polling. Also owns the report lifecycle around a run: reading an
existing report for reuse, and purging history before a regeneration.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import asyncio
import time

from connectors.impact_base import CalculationStatus, ImpactResourceGateway
from core.errors import (
    ComputeFailure,
    HistoryCleanupWarning,
    PollCancelledError,
    PollTimeoutError,
)
from core.observability.logging import get_logger
from core.observability.metrics import record_poll_read, record_processing_time

logger = get_logger(__name__)

StatusCallback = Callable[[CalculationStatus, int], None]


@dataclass
class PollConfig:
    """Bounds of the status poll loop. None disables a bound."""
    interval: float = 1.0  # seconds between status reads
    max_attempts: Optional[int] = None
    timeout_seconds: Optional[float] = 600.0


@dataclass
class HistoryPurgeResult:
    deleted: List[str] = field(default_factory=list)
    warnings: List[HistoryCleanupWarning] = field(default_factory=list)


def is_well_formed_report(report: Any) -> bool:
    """A usable report is a non-empty dict without an error shape."""
    return isinstance(report, dict) and bool(report) and "error" not in report and "statusCode" not in report


class ImpactComputeOrchestrator:
    """Push, trigger and poll over an ImpactResourceGateway.

    Example:
        orchestrator = ImpactComputeOrchestrator(gateway, PollConfig(interval=2.0))
        status = await orchestrator.compute(asset_id, {"basics": ..., "breakdown": [...]})
    """

    def __init__(
        self,
        gateway: ImpactResourceGateway,
        poll_config: Optional[PollConfig] = None,
        on_status: Optional[StatusCallback] = None,
    ):
        self.gateway = gateway
        self.poll_config = poll_config or PollConfig()
        self.on_status = on_status

    async def push_descriptive_data(self, resource_id: str, payload: Dict[str, Any]) -> None:
        started = time.monotonic()
        await self.gateway.push(resource_id, payload)
        record_processing_time("push", (time.monotonic() - started) * 1000)
        logger.info(f"Pushed descriptive data for {resource_id}")

    async def trigger_compute(self, resource_id: str) -> None:
        await self.gateway.trigger(resource_id)
        logger.info(f"Scheduled impact calculation for {resource_id}")

    async def _wait(self, cancel_event: Optional[asyncio.Event], resource_id: str) -> None:
        if cancel_event is None:
            await asyncio.sleep(self.poll_config.interval)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=self.poll_config.interval)
        except asyncio.TimeoutError:
            return
        raise PollCancelledError(resource_id)

    async def poll_until_terminal(
        self,
        resource_id: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> CalculationStatus:
        """Read the calculation status every `interval` until it is terminal.

        Raises:
            PollTimeoutError: max_attempts or timeout_seconds exceeded
            PollCancelledError: cancel_event was set
        """
        config = self.poll_config
        started = time.monotonic()
        attempts = 0
        status = CalculationStatus.UNKNOWN

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise PollCancelledError(resource_id)

            await self._wait(cancel_event, resource_id)

            status = await self.gateway.get_status(resource_id)
            attempts += 1
            record_poll_read()
            logger.debug(f"Calculation status for {resource_id}: {status.value} (read {attempts})")
            if self.on_status is not None:
                self.on_status(status, attempts)

            if status.is_terminal:
                record_processing_time("poll", (time.monotonic() - started) * 1000)
                return status

            if config.max_attempts is not None and attempts >= config.max_attempts:
                raise PollTimeoutError(resource_id, attempts, status.value)
            if config.timeout_seconds is not None and time.monotonic() - started >= config.timeout_seconds:
                raise PollTimeoutError(resource_id, attempts, status.value)

    async def compute(
        self,
        resource_id: str,
        payload: Dict[str, Any],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> CalculationStatus:
        """Push, trigger and poll to a terminal status.

        Raises:
            ComputeFailure: The calculation ended FAILED
            PollTimeoutError / PollCancelledError: From the poll loop
        """
        await self.push_descriptive_data(resource_id, payload)
        await self.trigger_compute(resource_id)
        status = await self.poll_until_terminal(resource_id, cancel_event)
        if status is CalculationStatus.FAILED:
            raise ComputeFailure(resource_id, status.value)
        return status

    async def purge_history(self, resource_id: str) -> HistoryPurgeResult:
        """Delete every report in the resource's history. Never raises."""
        result = HistoryPurgeResult()
        logger.info(f"Regenerate flag is true. Cleaning up old reports for {resource_id}...")

        try:
            entries = await self.gateway.list_history(resource_id)
        except Exception as e:
            logger.warning(f"Failed to fetch history for regeneration of {resource_id}: {e}")
            return result

        if entries:
            logger.info(f"Found {len(entries)} report(s). Deleting...")

        for entry in entries:
            try:
                deleted = await self.gateway.delete_history_entry(resource_id, entry.id)
            except Exception as e:
                warning = HistoryCleanupWarning(resource_id, entry.id, str(e))
            else:
                if deleted:
                    result.deleted.append(entry.id)
                    logger.info(f"Deleted report {entry.id}")
                    continue
                warning = HistoryCleanupWarning(resource_id, entry.id, "service refused the delete")
            result.warnings.append(warning)
            logger.warning(str(warning))

        return result

    async def fetch_existing_report(self, resource_id: str) -> Optional[Dict[str, Any]]:
        """The current report if it can be read and is well formed, else None."""
        try:
            report = await self.gateway.get_report(resource_id)
        except Exception as e:
            logger.warning(
                f"Existing report for {resource_id} could not be fetched ({e}). Proceeding to generate."
            )
            return None
        if is_well_formed_report(report):
            return report
        logger.info(f"No usable existing report for {resource_id}. Proceeding to generate.")
        return None
