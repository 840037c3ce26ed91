"""Publish/cache reconciliation core

Components:
- CacheStore: durable FIFO of records awaiting delivery (JSON array file)
- ConnectionMonitor: link state from broker lifecycle events
- PublishCoordinator: live-send vs cache per tick, ordered replay on connect
- EdgeSession: owns one run and its scoped shutdown
"""

from .types import Record, Transport, ConnectedCallback
from .cache import CacheStore
from .monitor import (
    ConnectionMonitor,
    ConnectionState,
    LinkEvent,
    ALERT_BROKER_UNAVAILABLE,
    ALERT_CONNECTION_LOST,
)
from .publish_coordinator import PublishCoordinator, CoordinatorHealth, TickOutcome
from .session import EdgeSession

__all__ = [
    # types
    "Record",
    "Transport",
    "ConnectedCallback",
    "CoordinatorHealth",
    "TickOutcome",
    # state
    "ConnectionMonitor",
    "ConnectionState",
    "LinkEvent",
    "ALERT_BROKER_UNAVAILABLE",
    "ALERT_CONNECTION_LOST",
    # runtime
    "CacheStore",
    "PublishCoordinator",
    "EdgeSession",
]
