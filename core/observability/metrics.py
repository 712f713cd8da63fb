"""
Metrics Collection for the Impact Report Pipeline

Collects and exposes in-memory metrics for:
- Report runs (started, success, partial, failed) per resource kind
- Transport retries per HTTP status
- Poll status reads
- Processing times per stage (average, p95)
"""

import statistics
from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, List, Optional, Any


# =============================================================================
# Metric Data Classes
# =============================================================================

@dataclass
class ReportMetrics:
    """Metrics for report pipeline runs."""
    started: int = 0
    succeeded: int = 0
    partial: int = 0
    failed: int = 0
    reused: int = 0

    # By resource kind
    by_kind: Dict[str, Dict[str, int]] = field(
        default_factory=lambda: defaultdict(
            lambda: {"started": 0, "succeeded": 0, "partial": 0, "failed": 0, "reused": 0}
        )
    )


@dataclass
class TransportMetrics:
    """Metrics for the resilient transport."""
    retries: int = 0
    network_errors: int = 0
    by_status: Dict[str, int] = field(default_factory=lambda: defaultdict(int))


@dataclass
class TimingMetrics:
    """Processing time metrics."""
    samples: List[float] = field(default_factory=list)
    max_samples: int = 1000

    by_stage: Dict[str, List[float]] = field(default_factory=lambda: defaultdict(list))

    def add_sample(self, duration_ms: float, stage: str = None):
        """Add a timing sample."""
        self.samples.append(duration_ms)
        if len(self.samples) > self.max_samples:
            self.samples = self.samples[-self.max_samples:]

        if stage:
            self.by_stage[stage].append(duration_ms)
            if len(self.by_stage[stage]) > self.max_samples:
                self.by_stage[stage] = self.by_stage[stage][-self.max_samples:]

    def get_average(self, stage: str = None) -> float:
        """Get average processing time."""
        samples = self.by_stage.get(stage, []) if stage else self.samples
        return statistics.mean(samples) if samples else 0.0

    def get_p95(self, stage: str = None) -> float:
        """Get 95th percentile processing time."""
        samples = self.by_stage.get(stage, []) if stage else self.samples
        if not samples:
            return 0.0
        sorted_samples = sorted(samples)
        idx = int(len(sorted_samples) * 0.95)
        return sorted_samples[min(idx, len(sorted_samples) - 1)]


# =============================================================================
# Metrics Collector (Singleton)
# =============================================================================

class MetricsCollector:
    """
    Thread-safe metrics collector for the report pipeline.

    Usage:
        metrics = MetricsCollector.instance()
        metrics.record_report_started("asset")
        metrics.record_report_finished("asset", "success", duration_ms=1500)
    """

    _instance: Optional["MetricsCollector"] = None
    _lock = Lock()

    def __init__(self):
        self.reports = ReportMetrics()
        self.transport = TransportMetrics()
        self.timings = TimingMetrics()
        self.poll_reads = 0
        self._lock = Lock()

    @classmethod
    def instance(cls) -> "MetricsCollector":
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    # =========================================================================
    # Report Metrics
    # =========================================================================

    def record_report_started(self, kind: str):
        """Record a pipeline start."""
        with self._lock:
            self.reports.started += 1
            self.reports.by_kind[kind]["started"] += 1

    def record_report_finished(self, kind: str, status: str, duration_ms: float = None,
                               reused: bool = False):
        """Record a pipeline result ("success" or "partial")."""
        with self._lock:
            if status == "success":
                self.reports.succeeded += 1
                self.reports.by_kind[kind]["succeeded"] += 1
            else:
                self.reports.partial += 1
                self.reports.by_kind[kind]["partial"] += 1
            if reused:
                self.reports.reused += 1
                self.reports.by_kind[kind]["reused"] += 1

            if duration_ms:
                self.timings.add_sample(duration_ms, f"report.{kind}")

    def record_report_failed(self, kind: str, error: str = None):
        """Record a pipeline that raised."""
        with self._lock:
            self.reports.failed += 1
            self.reports.by_kind[kind]["failed"] += 1

    # =========================================================================
    # Transport / Poll Metrics
    # =========================================================================

    def record_transport_retry(self, status: Optional[int]):
        """Record one transport retry; status None means a network error."""
        with self._lock:
            self.transport.retries += 1
            if status is None:
                self.transport.network_errors += 1
                self.transport.by_status["network"] += 1
            else:
                self.transport.by_status[str(status)] += 1

    def record_poll_read(self):
        """Record one calculation-status read."""
        with self._lock:
            self.poll_reads += 1

    # =========================================================================
    # Timing Metrics
    # =========================================================================

    def record_processing_time(self, stage: str, duration_ms: float):
        """Record a processing time sample."""
        with self._lock:
            self.timings.add_sample(duration_ms, stage)

    def get_timing_stats(self, stage: str = None) -> Dict[str, float]:
        """Get timing statistics for a stage."""
        with self._lock:
            return {
                "average_ms": self.timings.get_average(stage),
                "p95_ms": self.timings.get_p95(stage),
                "sample_count": len(self.timings.by_stage.get(stage, []) if stage else self.timings.samples),
            }

    # =========================================================================
    # Summary
    # =========================================================================

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        with self._lock:
            return {
                "reports": {
                    "started": self.reports.started,
                    "succeeded": self.reports.succeeded,
                    "partial": self.reports.partial,
                    "failed": self.reports.failed,
                    "reused": self.reports.reused,
                    "by_kind": {k: dict(v) for k, v in self.reports.by_kind.items()},
                },
                "transport": {
                    "retries": self.transport.retries,
                    "network_errors": self.transport.network_errors,
                    "by_status": dict(self.transport.by_status),
                },
                "poll_reads": self.poll_reads,
                "timings": {
                    "overall": {
                        "average_ms": self.timings.get_average(),
                        "p95_ms": self.timings.get_p95(),
                    },
                    "by_stage": {
                        stage: {
                            "average_ms": self.timings.get_average(stage),
                            "p95_ms": self.timings.get_p95(stage),
                        }
                        for stage in self.timings.by_stage.keys()
                    },
                },
            }


# =============================================================================
# Module-level convenience functions
# =============================================================================

def get_metrics() -> MetricsCollector:
    """Get the global metrics collector."""
    return MetricsCollector.instance()


def record_report_started(kind: str):
    """Record a pipeline start."""
    get_metrics().record_report_started(kind)


def record_report_finished(kind: str, status: str, duration_ms: float = None, reused: bool = False):
    """Record a pipeline result."""
    get_metrics().record_report_finished(kind, status, duration_ms, reused)


def record_report_failed(kind: str, error: str = None):
    """Record a pipeline that raised."""
    get_metrics().record_report_failed(kind, error)


def record_transport_retry(status: Optional[int]):
    """Record a transport retry."""
    get_metrics().record_transport_retry(status)


def record_poll_read():
    """Record a calculation-status read."""
    get_metrics().record_poll_read()


def record_processing_time(stage: str, duration_ms: float):
    """Record a processing time sample."""
    get_metrics().record_processing_time(stage, duration_ms)
