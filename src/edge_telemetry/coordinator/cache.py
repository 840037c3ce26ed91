"""
Durable FIFO cache for records that could not be published live.

The whole pending sequence lives in memory and is rewritten in full to a
single JSON array file after every mutation (write-then-confirm). A failed
write is logged and counted; memory remains the source of truth for the
current process.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Sequence

from loguru import logger

from ..errors import CachePersistenceError
from ..metrics.registry import metrics_registry
from .types import Record


class CacheStore:
    """Ordered, file-backed sequence of pending records.

    All mutating operations hold one asyncio.Lock across the
    read-modify-persist sequence, so a drain can never interleave with an
    append.

    Example:
        cache = CacheStore("cached_data.json")
        await cache.load()
        await cache.append({"timestamp": "..."})
        pending = await cache.drain_all()
    """

    def __init__(self, path: str | os.PathLike[str], *, mkdirs: bool = True):
        self.path = Path(path)
        self._mkdirs = mkdirs
        self._records: list[Record] = []
        self._lock = asyncio.Lock()
        self._label = self.path.name

    @property
    def size(self) -> int:
        return len(self._records)

    def snapshot(self) -> list[Record]:
        """Copy of the pending records, oldest first."""
        return list(self._records)

    async def load(self) -> list[Record]:
        """Read persisted records; missing or corrupt file yields []."""
        async with self._lock:
            self._records = await asyncio.to_thread(self._read_file)
            self._update_depth()
            if self._records:
                logger.info(f"Loaded {len(self._records)} cached data entries from {self.path}")
            return list(self._records)

    async def append(self, record: Record) -> int:
        """Add one record and persist the full sequence. Returns new depth."""
        async with self._lock:
            self._records.append(record)
            await self._persist()
            return len(self._records)

    async def restore(self, records: Sequence[Record]) -> int:
        """Put previously drained records back at the head, order preserved."""
        if not records:
            return self.size
        async with self._lock:
            self._records[:0] = records
            await self._persist()
            return len(self._records)

    async def drain_all(self) -> list[Record]:
        """Atomically remove and return every cached record, oldest first."""
        async with self._lock:
            drained, self._records = self._records, []
            await self._persist()
            return drained

    async def flush(self) -> None:
        """Persist the current sequence without changing it."""
        async with self._lock:
            await self._persist()

    # --- file I/O ---

    async def _persist(self) -> bool:
        snapshot = list(self._records)
        self._update_depth()
        try:
            await asyncio.to_thread(self._write_file, snapshot)
        except CachePersistenceError as exc:
            metrics_registry.cache_persist_failures_total.labels(cache=self._label).inc()
            logger.error(f"Failed to save cached data: {exc}")
            return False
        logger.debug(f"Saved cached data: {len(snapshot)} entries")
        return True

    def _read_file(self) -> list[Record]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.error(f"Failed to load cached data: {exc}")
            return []
        if not isinstance(data, list):
            logger.error(
                f"Failed to load cached data: expected a JSON array, got {type(data).__name__}"
            )
            return []
        return data

    def _write_file(self, records: list[Record]) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            if self._mkdirs:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as exc:
            raise CachePersistenceError(str(exc)) from exc

    def _update_depth(self) -> None:
        metrics_registry.cache_depth.labels(cache=self._label).set(len(self._records))
