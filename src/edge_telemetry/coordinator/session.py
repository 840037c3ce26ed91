"""
Process-level context owning every component of one simulator run.

No module-level mutable state: the entry point builds one ``EdgeSession``
and passes it around. ``shutdown()`` always ends with a cache flush, even if
stopping the ticker or closing the transport raised.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from loguru import logger

from .cache import CacheStore
from .monitor import ConnectionMonitor
from .publish_coordinator import PublishCoordinator
from .types import Transport


@dataclass
class EdgeSession:
    cache: CacheStore
    monitor: ConnectionMonitor
    transport: Transport
    coordinator: PublishCoordinator
    _started: bool = field(default=False, init=False)
    _closed: bool = field(default=False, init=False)

    async def start(self) -> None:
        if self._started:
            return
        self._started = True
        await self.cache.load()
        self.monitor.on_connected(self.coordinator.replay_cache)
        self.transport.connect()
        await self.coordinator.start()

    async def shutdown(self) -> None:
        """Stop ticking, close the link, persist whatever is still cached."""
        if self._closed:
            return
        self._closed = True
        logger.info("Shutting down...")
        try:
            await self.coordinator.stop()
        finally:
            try:
                self.transport.close()
            finally:
                self.monitor.remove_listener(self.coordinator.replay_cache)
                await self.cache.flush()
                logger.info(f"Shutdown complete ({self.cache.size} entries left in cache)")

    async def run_until(self, stop: asyncio.Event) -> None:
        """Run until ``stop`` is set, then shut down."""
        try:
            await self.start()
            await stop.wait()
        finally:
            await self.shutdown()

    async def __aenter__(self) -> "EdgeSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()
