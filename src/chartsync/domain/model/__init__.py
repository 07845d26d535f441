"""Public domain model surface."""

from __future__ import annotations

from chartsync.domain.model.artifact import (
    CatalogListing,
    CatalogVersion,
    ChartArtifact,
    ChartMetadata,
)
from chartsync.domain.model.catalog import Application, VersionRecord
from chartsync.domain.model.enums import SourceKind, TagOrder
from chartsync.domain.model.primitives import (
    ApplicationId,
    ChartRepoId,
    OciRegistryId,
    SourceRef,
    utcnow,
)
from chartsync.domain.model.sources import ChartRepository, ChartSource, OciRegistry

__all__ = [
    "Application",
    "ApplicationId",
    "CatalogListing",
    "CatalogVersion",
    "ChartArtifact",
    "ChartMetadata",
    "ChartRepoId",
    "ChartRepository",
    "ChartSource",
    "OciRegistry",
    "OciRegistryId",
    "SourceKind",
    "SourceRef",
    "TagOrder",
    "VersionRecord",
    "utcnow",
]
