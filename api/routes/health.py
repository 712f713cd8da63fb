"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Response
from pydantic import BaseModel

from core import __version__
from core.config import load_settings
from core.errors import ConfigurationError


router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    version: str
    services: Dict[str, str]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint. Reports whether the impact API key is configured."""
    try:
        settings = load_settings()
    except ConfigurationError:
        settings = None

    return HealthResponse(
        status="healthy" if settings else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        services={
            "api": "up",
            "impact_api": "configured" if settings else "missing_api_key",
            "source_platform": (
                "configured" if settings and settings.source_base_url and settings.source_token
                else "not_configured"
            ),
        }
    )


@router.get("/ready")
async def readiness_check() -> Dict[str, str]:
    """Readiness probe for Kubernetes."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check(response: Response) -> Dict[str, str]:
    """Liveness probe for Kubernetes."""
    return {"status": "alive"}
