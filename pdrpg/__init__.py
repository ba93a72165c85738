"""
PDRPG progression client.

Caches the results of the authoritative game server per domain, cascades
mutations across domains, derives progression views, and queues level-up
notifications.
"""

from .context import AppContext, create_context

__version__ = "0.1.0"

__all__ = ["AppContext", "create_context", "__version__"]
