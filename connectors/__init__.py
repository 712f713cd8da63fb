"""Connectors - remote service integrations.

This package contains the resilient HTTP transport, the abstract impact
gateway interface and the concrete service clients:
- vested_impact/: the impact scoring service (assets, groups, reference data)
- source_platform/: the upstream data platform that supplies profiles

Key Design Principle:
- The reconciler, orchestrator and report pipeline depend ONLY on
  ImpactResourceGateway
- All gateway methods return NORMALIZED types (CreateOutcomeRef, SearchHit, ...)
- No service-specific models leak through the interface

To add a new resource kind:
1. Implement ImpactResourceGateway
2. Register it using the @register_gateway decorator
"""

from connectors.http_transport import ResilientTransport, RetryConfig, TransportResponse
from connectors.impact_base import (
    # Core interface
    ImpactResourceGateway,
    ResourceKind,
    CalculationStatus,

    # Normalized reference types
    CreateOutcomeRef,
    SearchHit,
    HistoryEntryRef,
    SuggestedActivity,

    # Factory
    create_gateway,
    register_gateway,
    list_available_gateways,
)

__all__ = [
    # Transport
    "ResilientTransport",
    "RetryConfig",
    "TransportResponse",

    # Core interface
    "ImpactResourceGateway",
    "ResourceKind",
    "CalculationStatus",

    # Normalized reference types
    "CreateOutcomeRef",
    "SearchHit",
    "HistoryEntryRef",
    "SuggestedActivity",

    # Factory
    "create_gateway",
    "register_gateway",
    "list_available_gateways",
]
