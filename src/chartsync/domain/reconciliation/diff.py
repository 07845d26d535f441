"""Catalog diff: which listed versions are not mirrored yet."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

    from chartsync.domain.model import CatalogVersion


def new_versions(
    remote: Iterable[CatalogVersion],
    persisted: Collection[str],
) -> list[CatalogVersion]:
    """Return the remote versions whose identifier is not persisted, in remote order.

    Repeated identifiers in the remote listing are returned once.
    """

    fresh: list[CatalogVersion] = []
    seen: set[str] = set()
    for entry in remote:
        if entry.version in persisted or entry.version in seen:
            continue
        seen.add(entry.version)
        fresh.append(entry)
    return fresh
