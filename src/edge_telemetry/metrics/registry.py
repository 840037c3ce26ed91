"""
Prometheus metrics for the edge publisher.

Module-level collectors register with the global REGISTRY on import; use
``metrics_registry`` to reach them from components.
"""

from prometheus_client import Counter, Gauge, Histogram


# --- Publish path ---

EDGE_TICKS_TOTAL = Counter(
    "edge_ticks_total",
    "Telemetry ticks processed, by outcome",
    ["coordinator", "outcome"],
)

EDGE_REPLAYED_TOTAL = Counter(
    "edge_replayed_total",
    "Cached records handed to the transport on reconnect",
    ["coordinator"],
)

EDGE_PUBLISH_LATENCY_MS = Histogram(
    "edge_publish_latency_ms",
    "Live publish latency in milliseconds",
    ["coordinator"],
    buckets=[1, 2.5, 5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

# --- Cache ---

EDGE_CACHE_DEPTH = Gauge(
    "edge_cache_depth",
    "Records currently held in the local cache",
    ["cache"],
)

EDGE_CACHE_PERSIST_FAILURES_TOTAL = Counter(
    "edge_cache_persist_failures_total",
    "Failed writes of the cache file",
    ["cache"],
)

# --- Link ---

EDGE_LINK_EVENTS_TOTAL = Counter(
    "edge_link_events_total",
    "Broker lifecycle events observed",
    ["event"],
)


class MetricsRegistry:
    """Centralized access to the edge publisher metrics."""

    ticks_total = EDGE_TICKS_TOTAL
    replayed_total = EDGE_REPLAYED_TOTAL
    publish_latency_ms = EDGE_PUBLISH_LATENCY_MS
    cache_depth = EDGE_CACHE_DEPTH
    cache_persist_failures_total = EDGE_CACHE_PERSIST_FAILURES_TOTAL
    link_events_total = EDGE_LINK_EVENTS_TOTAL


# Singleton instance
metrics_registry = MetricsRegistry()
