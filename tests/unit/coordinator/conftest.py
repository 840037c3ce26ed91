"""
Fakes for coordinator unit tests.
"""

import asyncio
import json

import pytest

from edge_telemetry.coordinator import CacheStore
from edge_telemetry.errors import CachePersistenceError, PublishError


class FakeTransport:
    """Records every publish; can be told to fail live sends or refuse replays.

    ``live_exc`` replaces the exception a failing live send raises and
    ``replay_exc`` the one raised once ``refuse_after`` replays went through.
    ``publish_delay`` stretches every live send's ack round-trip.
    """

    def __init__(
        self,
        *,
        fail_publish: bool = False,
        refuse_after: int | None = None,
        live_exc: Exception | None = None,
        replay_exc: Exception | None = None,
        publish_delay: float = 0.0,
    ):
        self.fail_publish = fail_publish or live_exc is not None
        self.refuse_after = refuse_after
        self.live_exc = live_exc or PublishError("broker rejected publish")
        self.replay_exc = replay_exc or PublishError("The client is not currently connected.")
        self.publish_delay = publish_delay
        self.live: list[dict] = []
        self.replayed: list[dict] = []
        self.topics: list[str] = []
        self.connect_calls = 0
        self.closed = False

    def connect(self) -> None:
        self.connect_calls += 1

    async def publish(self, topic: str, payload: str) -> None:
        await asyncio.sleep(self.publish_delay)  # simulate ack round-trip
        if self.fail_publish:
            raise self.live_exc
        self.topics.append(topic)
        self.live.append(json.loads(payload))

    def publish_nowait(self, topic: str, payload: str) -> None:
        if self.refuse_after is not None and len(self.replayed) >= self.refuse_after:
            raise self.replay_exc
        self.topics.append(topic)
        self.replayed.append(json.loads(payload))

    def close(self) -> None:
        self.closed = True

    @property
    def publish_calls(self) -> int:
        return len(self.live) + len(self.replayed)


class RecordingCache(CacheStore):
    """CacheStore that logs every interaction and can fail every disk write."""

    def __init__(self, path, *, fail_writes: bool = False):
        super().__init__(path)
        self.fail_writes = fail_writes
        self.calls: list[str] = []

    async def load(self):
        self.calls.append("load")
        return await super().load()

    async def append(self, record):
        self.calls.append("append")
        return await super().append(record)

    async def drain_all(self):
        self.calls.append("drain_all")
        return await super().drain_all()

    async def flush(self):
        self.calls.append("flush")
        await super().flush()

    async def _persist(self) -> bool:
        self.calls.append("persist")
        return await super()._persist()

    def _write_file(self, records):
        if self.fail_writes:
            raise CachePersistenceError("No space left on device")
        super()._write_file(records)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def failing_transport():
    return FakeTransport(fail_publish=True)


@pytest.fixture
def make_transport():
    """Factory for FakeTransport with custom failure knobs."""
    return FakeTransport


@pytest.fixture
def make_cache(cache_path):
    """Factory for RecordingCache bound to the per-test cache file."""

    def _make(*, fail_writes: bool = False, path=None):
        return RecordingCache(path or cache_path, fail_writes=fail_writes)

    return _make
