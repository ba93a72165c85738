"""
Remote call boundary for PDRPG.

Backends:
- HttpBackend: local PDRPG service over HTTP
- MockBackend: scripted responses for tests
"""

from .base import COMMANDS, KNOWN_COMMANDS, RemoteBackend, RemoteCallError
from .http import HttpBackend
from .mock import MockBackend


def create_backend(config: dict | None = None) -> RemoteBackend:
    """
    Create the configured backend.

    Args:
        config: Loaded Config (see pdrpg.config); defaults when None

    Returns:
        A RemoteBackend instance

    Raises:
        ValueError: If the backend name is unknown
    """
    from ..config import DEFAULT_CONFIG

    config = {**DEFAULT_CONFIG, **(config or {})}
    backend = config["backend"]

    if backend == "http":
        return HttpBackend(
            base_url=config["base_url"],
            timeout=config["timeout"],
            api_key=config.get("api_key"),
        )
    if backend == "mock":
        return MockBackend()
    raise ValueError(f"Unknown backend: {backend}")


__all__ = [
    "COMMANDS",
    "KNOWN_COMMANDS",
    "RemoteBackend",
    "RemoteCallError",
    "HttpBackend",
    "MockBackend",
    "create_backend",
]
