"""
Edge telemetry publisher

Synthesizes trailer telemetry on a fixed tick, publishes it to an MQTT broker
while the link is up and caches it to a local JSON file while it is not.
The cache is replayed in order on every reconnect.

Usage:
    from edge_telemetry import CacheStore, ConnectionMonitor, PublishCoordinator, generate
"""

from .coordinator import (
    CacheStore,
    ConnectionMonitor,
    ConnectionState,
    CoordinatorHealth,
    EdgeSession,
    LinkEvent,
    PublishCoordinator,
    TickOutcome,
    Transport,
)
from .errors import (
    CachePersistenceError,
    EdgeTelemetryError,
    PublishError,
    TransportUnavailable,
)
from .payload import generate

__version__ = "1.0.0"
__all__ = [
    "CacheStore",
    "ConnectionMonitor",
    "ConnectionState",
    "CoordinatorHealth",
    "EdgeSession",
    "LinkEvent",
    "PublishCoordinator",
    "TickOutcome",
    "Transport",
    "CachePersistenceError",
    "EdgeTelemetryError",
    "PublishError",
    "TransportUnavailable",
    "generate",
]
