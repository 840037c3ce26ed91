"""
Custom exceptions for the edge telemetry publisher.

None of these are fatal to a running simulator: they mark the point where a
record falls back from the live path to the local cache.
"""

from __future__ import annotations



class EdgeTelemetryError(Exception):
    """Base operational error for edge telemetry."""

    pass


class PublishError(EdgeTelemetryError):
    """Live publish refused by the client or not confirmed in time."""

    pass


class CachePersistenceError(EdgeTelemetryError):
    """Writing the cache file failed (in-memory state stays authoritative)."""

    pass


class TransportUnavailable(EdgeTelemetryError):
    """Broker could not be reached at connect time."""

    pass


def map_transport_error(e: BaseException) -> EdgeTelemetryError:
    """Map paho return codes / socket errors onto the taxonomy."""
    if isinstance(e, EdgeTelemetryError):
        return e
    if isinstance(e, TimeoutError):
        return PublishError(f"publish timed out: {e}")
    if isinstance(e, OSError):  # refused, unreachable, DNS
        return TransportUnavailable(str(e))
    return PublishError(str(e))
