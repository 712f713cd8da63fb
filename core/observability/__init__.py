"""
Observability Module for the Impact Report Pipeline

Provides:
- Structured logging with correlation IDs
- Metrics collection (report runs, transport retries, poll reads, timings)
"""

from core.observability.metrics import (
    MetricsCollector,
    get_metrics,
    record_report_started,
    record_report_finished,
    record_report_failed,
    record_transport_retry,
    record_poll_read,
    record_processing_time,
)

from core.observability.logging import (
    get_logger,
    configure_logging,
    CorrelationContext,
    with_correlation,
    bind_correlation,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "get_metrics",
    "record_report_started",
    "record_report_finished",
    "record_report_failed",
    "record_transport_retry",
    "record_poll_read",
    "record_processing_time",
    # Logging
    "get_logger",
    "configure_logging",
    "CorrelationContext",
    "with_correlation",
    "bind_correlation",
]
