"""
Publish Coordinator

Per tick: generate one record, then either send it live (link up) or cache
it (link down / live send failed). On each transition into CONNECTED: drain
the cache and replay it in insertion order, fire-and-forget.

A record takes exactly one of the two paths per tick. Ticks fire at a fixed
rate and each runs as its own task, so a slow publish never stretches the
period. Ticks are not blocked by a replay in progress; the cache lock only
guarantees that a drain and an append never mix.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from loguru import logger

from ..metrics.registry import metrics_registry
from .cache import CacheStore
from .monitor import ConnectionMonitor
from .types import Record, Transport


class TickOutcome(str, Enum):
    PUBLISHED = "published"
    CACHED = "cached"


@dataclass(frozen=True)
class CoordinatorHealth:
    coordinator_id: str
    running: bool
    connection_state: str
    cache_depth: int
    ticks: int
    published: int
    cached: int
    replayed: int


class PublishCoordinator:
    """Live-send vs cache decision engine.

    Args:
        generator: zero-arg callable returning one record per tick
        cache: durable cache (only this coordinator mutates it)
        monitor: connection state source
        transport: broker capability
        topic: destination topic for every record
        interval: seconds between tick starts, fixed rate (first tick after one interval)
        coord_id: label for logs and metrics
    """

    def __init__(
        self,
        *,
        generator: Callable[[], Record],
        cache: CacheStore,
        monitor: ConnectionMonitor,
        transport: Transport,
        topic: str,
        interval: float = 10.0,
        coord_id: str = "edge",
    ):
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._generate = generator
        self._cache = cache
        self._monitor = monitor
        self._transport = transport
        self._topic = topic
        self._interval = interval
        self._coord_id = coord_id

        self._task: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()
        self._stopping = asyncio.Event()

        self._ticks = 0
        self._published = 0
        self._cached = 0
        self._replayed = 0

    # --- lifecycle ---

    async def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._run(), name=f"{self._coord_id}-ticker")
        logger.info(
            f"Publishing synthetic trailer data every {self._interval:g} seconds "
            f"to '{self._topic}'"
        )

    async def stop(self) -> None:
        """Stop scheduling ticks; ticks already in flight run to completion."""
        self._stopping.set()
        task, self._task = self._task, None
        if task is None:
            return
        await task
        if self._inflight:
            await asyncio.gather(*list(self._inflight))
        logger.info(f"Coordinator {self._coord_id} stopped")

    async def __aenter__(self) -> "PublishCoordinator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._interval
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(
                    self._stopping.wait(), timeout=max(0.0, deadline - loop.time())
                )
                return
            except asyncio.TimeoutError:
                pass
            deadline += self._interval
            task = asyncio.create_task(self._safe_tick(), name=f"{self._coord_id}-tick")
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def _safe_tick(self) -> None:
        try:
            await self.tick()
        except Exception as exc:
            logger.exception(f"Tick failed: {type(exc).__name__}: {exc}")

    # --- decision core ---

    async def tick(self) -> TickOutcome:
        """Generate one record and send it live or cache it."""
        record = self._generate()
        self._ticks += 1

        if self._monitor.is_connected():
            outcome = await self._publish_live(record)
        else:
            depth = await self._cache.append(record)
            logger.info(f"MQTT unavailable - cached data (total: {depth} entries)")
            outcome = TickOutcome.CACHED

        if outcome is TickOutcome.PUBLISHED:
            self._published += 1
        else:
            self._cached += 1
        metrics_registry.ticks_total.labels(
            coordinator=self._coord_id, outcome=outcome.value
        ).inc()
        return outcome

    async def _publish_live(self, record: Record) -> TickOutcome:
        payload = json.dumps(record)
        t0 = time.perf_counter()
        try:
            await self._transport.publish(self._topic, payload)
        except Exception as exc:
            # any failed attempt is handled like being offline
            logger.error(f"Publish failed: {type(exc).__name__}: {exc}")
            depth = await self._cache.append(record)
            logger.info(f"Cached failed publish (total: {depth} entries)")
            return TickOutcome.CACHED

        metrics_registry.publish_latency_ms.labels(coordinator=self._coord_id).observe(
            (time.perf_counter() - t0) * 1000.0
        )
        logger.info("Published data successfully")
        logger.debug(f"Sent data: {payload}")
        return TickOutcome.PUBLISHED

    async def replay_cache(self) -> int:
        """Drain the cache and hand every record to the transport in order.

        If the transport raises for any record (link dropped mid-replay, or a
        refusal by the client), that record and everything after it are put
        back at the head of the cache in their original order, ahead of
        anything cached while the replay ran.

        Returns:
            Number of records handed to the transport
        """
        drained = await self._cache.drain_all()
        if not drained:
            return 0

        sent = 0
        for record in drained:
            try:
                self._transport.publish_nowait(self._topic, json.dumps(record))
            except Exception as exc:
                remaining = drained[sent:]
                logger.warning(
                    f"Replay interrupted after {sent}/{len(drained)} entries: "
                    f"{type(exc).__name__}: {exc}; re-caching {len(remaining)}"
                )
                await self._cache.restore(remaining)
                break
            sent += 1
            logger.info("Published cached data entry")

        self._replayed += sent
        metrics_registry.replayed_total.labels(coordinator=self._coord_id).inc(sent)
        if sent == len(drained):
            logger.success(f"Replayed {sent} cached entries")
        return sent

    # --- health ---

    def health(self) -> CoordinatorHealth:
        return CoordinatorHealth(
            coordinator_id=self._coord_id,
            running=self._task is not None and not self._task.done(),
            connection_state=self._monitor.state.value,
            cache_depth=self._cache.size,
            ticks=self._ticks,
            published=self._published,
            cached=self._cached,
            replayed=self._replayed,
        )
