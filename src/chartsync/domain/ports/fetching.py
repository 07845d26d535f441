"""Ports for reading chart catalogs from external providers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from chartsync.domain.model import (
        CatalogListing,
        CatalogVersion,
        ChartArtifact,
        ChartSource,
    )


@runtime_checkable
class ArtifactSource(Protocol):
    """Catalog reader bound to one chart source.

    Used as an async context manager so network clients live exactly as long
    as one reconciliation pass.
    """

    async def __aenter__(self) -> Self: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...

    async def list_catalog(self) -> CatalogListing:
        """Return ``{chart name: [versions...]}`` in source order."""
        ...

    async def fetch_artifact(self, name: str, version: CatalogVersion) -> ChartArtifact:
        """Download and parse a single chart version."""
        ...


type ArtifactSourceFactory = Callable[[ChartSource], ArtifactSource]


__all__ = ["ArtifactSource", "ArtifactSourceFactory"]
