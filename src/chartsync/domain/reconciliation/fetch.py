"""Per-version fetch pipelines feeding a :class:`VersionBatchWriter`."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from chartsync.domain.errors import ArtifactFetchError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from chartsync.domain.model import CatalogVersion, VersionRecord

    from .batching import VersionBatchWriter

log = getLogger(__name__)

type FetchRecord = Callable[[CatalogVersion], Awaitable[VersionRecord]]


@dataclass(slots=True)
class FetchStats:
    attempted: int = 0
    fetched: int = 0
    failed: list[str] = field(default_factory=list[str])


async def fetch_sequential(
    versions: Sequence[CatalogVersion],
    fetch: FetchRecord,
    writer: VersionBatchWriter,
) -> FetchStats:
    """Fetch versions one at a time, in order, skipping the ones that fail."""

    stats = FetchStats()
    for version in versions:
        stats.attempted += 1
        try:
            record = await fetch(version)
        except ArtifactFetchError as exc:
            log.error("Skipping %s %s: %s", writer.label, version.version, exc)
            stats.failed.append(version.version)
            continue
        await writer.add(record)
        stats.fetched += 1

    await writer.flush()
    return stats


async def fetch_bounded(
    versions: Sequence[CatalogVersion],
    fetch: FetchRecord,
    writer: VersionBatchWriter,
    *,
    limit: int,
) -> FetchStats:
    """Fetch versions concurrently with at most ``limit`` fetches in flight.

    Every version gets its own task; the semaphore only delays admission of
    the fetch. Completion order decides buffer order. A failed fetch is logged
    and adds nothing; a failed flush cancels the remaining tasks and is
    re-raised.
    """

    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    stats = FetchStats()
    slots = asyncio.Semaphore(limit)

    async def fetch_one(version: CatalogVersion) -> None:
        async with slots:
            stats.attempted += 1
            try:
                record = await fetch(version)
            except ArtifactFetchError as exc:
                log.error("Skipping %s %s: %s", writer.label, version.version, exc)
                stats.failed.append(version.version)
                return
        await writer.add(record)
        stats.fetched += 1

    try:
        async with asyncio.TaskGroup() as group:
            for version in versions:
                group.create_task(fetch_one(version))
    except ExceptionGroup as errors:
        raise errors.exceptions[0] from errors

    await writer.flush()
    return stats
