"""
Demo: ticks while the link is down, then a reconnect replays the backlog.

Uses an in-process transport so no broker is needed.
"""

import asyncio
import json
import tempfile
from pathlib import Path

from loguru import logger

from edge_telemetry.coordinator import (
    CacheStore,
    ConnectionMonitor,
    EdgeSession,
    LinkEvent,
    PublishCoordinator,
)
from edge_telemetry.payload import generate


class PrintTransport:
    """Transport that logs what it would send."""

    def connect(self) -> None:
        logger.info("PrintTransport connect()")

    async def publish(self, topic: str, payload: str) -> None:
        await asyncio.sleep(0.01)  # simulate ack latency
        logger.info(f"LIVE   {topic} ts={json.loads(payload)['timestamp']}")

    def publish_nowait(self, topic: str, payload: str) -> None:
        logger.info(f"REPLAY {topic} ts={json.loads(payload)['timestamp']}")

    def close(self) -> None:
        logger.info("PrintTransport close()")


async def main():
    cache_file = Path(tempfile.mkdtemp()) / "cached_data.json"
    cache = CacheStore(cache_file)
    monitor = ConnectionMonitor()
    transport = PrintTransport()
    coord = PublishCoordinator(
        generator=generate,
        cache=cache,
        monitor=monitor,
        transport=transport,
        topic="trailer/data",
        interval=0.2,
        coord_id="demo",
    )

    async with EdgeSession(cache=cache, monitor=monitor, transport=transport, coordinator=coord):
        logger.info("Link down: ticks go to the cache")
        await asyncio.sleep(1.1)
        logger.info(f"Cache depth before reconnect: {cache.size}")

        await monitor.dispatch(LinkEvent.CONNECTED)
        logger.info(f"Cache depth after replay: {cache.size}")

        await asyncio.sleep(0.7)
        await monitor.dispatch(LinkEvent.DISCONNECTED, "demo flap")
        await asyncio.sleep(0.5)

        h = coord.health()
        logger.info(
            f"Final health: ticks={h.ticks} published={h.published} "
            f"cached={h.cached} replayed={h.replayed} depth={h.cache_depth}"
        )

    logger.info(f"Cache file left at {cache_file}")


if __name__ == "__main__":
    asyncio.run(main())
