"""Chunked persistence of fetched version records."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from chartsync.domain.model import VersionRecord

log = getLogger(__name__)

DEFAULT_CHUNK_SIZE = 20

type SaveBatch = Callable[[Sequence[VersionRecord]], int]


class VersionBatchWriter:
    """Buffer of version records flushed every ``chunk_size`` records.

    One writer is shared by every fetch task of an application. Appending,
    the threshold check and the flush all happen under one lock; the fetch
    itself never does.
    """

    def __init__(
        self,
        save: SaveBatch,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        label: str = "",
    ) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self._save = save
        self._buffer: list[VersionRecord] = []
        self._lock = asyncio.Lock()
        self.chunk_size = chunk_size
        self.label = label
        self.flushes = 0
        self.submitted = 0
        self.inserted = 0

    @property
    def pending(self) -> int:
        return len(self._buffer)

    async def add(self, record: VersionRecord) -> None:
        async with self._lock:
            self._buffer.append(record)
            if len(self._buffer) >= self.chunk_size:
                self._flush_locked()

    async def flush(self) -> None:
        """Write whatever is buffered (no-op when empty)."""
        async with self._lock:
            self._flush_locked()

    def _flush_locked(self) -> None:
        if not self._buffer:
            return
        batch, self._buffer = self._buffer, []
        # The save runs on the event loop thread; in-flight fetches wait until it returns.
        log.info("Saving %s chart versions into DB for %s", len(batch), self.label)
        inserted = self._save(batch)
        self.flushes += 1
        self.submitted += len(batch)
        self.inserted += inserted
