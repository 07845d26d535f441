"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import ArtifactSource, ArtifactSourceFactory
from .persistence import ApplicationRepository, SourceRepository, VersionRepository
from .unit_of_work import (
    ChartSyncRepositories,
    ChartSyncUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ApplicationRepository",
    "ArtifactSource",
    "ArtifactSourceFactory",
    "ChartSyncRepositories",
    "ChartSyncUnitOfWork",
    "RepositoryCollection",
    "SourceRepository",
    "UnitOfWork",
    "VersionRepository",
]
