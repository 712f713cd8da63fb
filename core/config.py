"""Settings loaded from the environment.

A `.env` file at the repo root is loaded first when present, the same way the
Temporal client factory does it.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from core.errors import ConfigurationError

env_path = Path(__file__).resolve().parents[1] / ".env"
if env_path.exists():
    load_dotenv(env_path)


DEFAULT_BASE_URL = "https://api.vestedimpact.co.uk/v2"

# Includes 400. Override with VESTED_RETRY_STATUSES.
DEFAULT_RETRY_STATUSES: Tuple[int, ...] = (400, 429, 500, 503, 504)


@dataclass
class Settings:
    """Runtime settings for the report pipeline."""
    api_key: str
    base_url: str = DEFAULT_BASE_URL

    # Transport
    max_attempts: int = 4
    retry_base_delay: float = 1.0
    retry_on_status: Tuple[int, ...] = field(default=DEFAULT_RETRY_STATUSES)
    timeout_seconds: int = 30

    # Polling
    poll_interval: float = 1.0
    poll_timeout: Optional[float] = 600.0
    poll_max_attempts: Optional[int] = None

    # Upstream profile source
    source_base_url: Optional[str] = None
    source_token: Optional[str] = None


def _float_env(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _int_env(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def _status_list_env(name: str, default: Tuple[int, ...]) -> Tuple[int, ...]:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return tuple(int(part) for part in value.split(",") if part.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a comma separated list of status codes")


def load_settings() -> Settings:
    """Build Settings from environment variables.

    Reads:
    - VESTED_API_KEY (required)
    - VESTED_BASE_URL
    - VESTED_MAX_ATTEMPTS, VESTED_RETRY_BASE_DELAY, VESTED_RETRY_STATUSES
    - VESTED_TIMEOUT_SECONDS
    - REPORT_POLL_INTERVAL, REPORT_POLL_TIMEOUT, REPORT_POLL_MAX_ATTEMPTS
    - SOURCE_PLATFORM_BASE_URL, SOURCE_PLATFORM_TOKEN

    Raises:
        ConfigurationError: If the API key is missing or a value is malformed
    """
    api_key = os.getenv("VESTED_API_KEY")
    if not api_key:
        raise ConfigurationError("Server configuration error: VESTED_API_KEY not set")

    return Settings(
        api_key=api_key,
        base_url=os.getenv("VESTED_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        max_attempts=_int_env("VESTED_MAX_ATTEMPTS", 4),
        retry_base_delay=_float_env("VESTED_RETRY_BASE_DELAY", 1.0),
        retry_on_status=_status_list_env("VESTED_RETRY_STATUSES", DEFAULT_RETRY_STATUSES),
        timeout_seconds=_int_env("VESTED_TIMEOUT_SECONDS", 30),
        poll_interval=_float_env("REPORT_POLL_INTERVAL", 1.0),
        poll_timeout=_float_env("REPORT_POLL_TIMEOUT", 600.0),
        poll_max_attempts=_int_env("REPORT_POLL_MAX_ATTEMPTS", None),
        source_base_url=os.getenv("SOURCE_PLATFORM_BASE_URL") or None,
        source_token=os.getenv("SOURCE_PLATFORM_TOKEN") or None,
    )
