"""Temporal client factory.

Creates connections to Temporal Cloud, or to a local dev server when no API
key is configured, using credentials from the environment.
"""

import os
from typing import Optional
from pathlib import Path

# Load .env file if it exists
from dotenv import load_dotenv
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from temporalio.client import Client
from temporalio.service import TLSConfig

LOCAL_ENDPOINT = "localhost:7233"


def _tls_config(cert_path: Optional[str], key_path: Optional[str]) -> TLSConfig:
    if not cert_path:
        return TLSConfig()
    client_cert = Path(cert_path).read_bytes()
    client_key = Path(key_path).read_bytes() if key_path else None
    return TLSConfig(client_cert=client_cert, client_private_key=client_key)


async def get_temporal_client() -> Client:
    """Create and return a Temporal client.

    Reads configuration from environment variables:
    - TEMPORAL_ENDPOINT: Endpoint (default "localhost:7233")
    - TEMPORAL_NAMESPACE: Namespace (default "default")
    - TEMPORAL_API_KEY: Temporal Cloud API key; when unset the connection
      is plain (local dev server)
    - TEMPORAL_CERT_PATH / TEMPORAL_KEY_PATH: Client certificate and key (optional, mTLS)

    Returns:
        Connected Temporal client
    """
    endpoint = os.getenv("TEMPORAL_ENDPOINT", LOCAL_ENDPOINT)
    namespace = os.getenv("TEMPORAL_NAMESPACE", "default")
    api_key = os.getenv("TEMPORAL_API_KEY")
    cert_path = os.getenv("TEMPORAL_CERT_PATH")
    key_path = os.getenv("TEMPORAL_KEY_PATH")

    if not api_key and not cert_path:
        return await Client.connect(endpoint, namespace=namespace)

    return await Client.connect(
        endpoint,
        namespace=namespace,
        tls=_tls_config(cert_path, key_path),
        api_key=api_key,
    )
