"""Core module - configuration, error taxonomy and observability.

Remote-service specifics (Vested Impact API, upstream profile source) belong
in /connectors/.
"""

__version__ = "1.0.0"
