"""Outcome summaries of a reconciliation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chartsync.domain.model import SourceRef


@dataclass(slots=True)
class ApplicationReport:
    name: str
    new_versions: int = 0
    fetched: int = 0
    inserted: int = 0
    failed_versions: list[str] = field(default_factory=list[str])
    latest: str | None = None
    latest_changed: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class SourceReport:
    ref: SourceRef
    applications: list[ApplicationReport] = field(default_factory=list[ApplicationReport])
    inactivated: list[str] = field(default_factory=list[str])
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed_applications(self) -> list[ApplicationReport]:
        return [application for application in self.applications if not application.ok]

    @property
    def inserted(self) -> int:
        return sum(application.inserted for application in self.applications)


@dataclass(slots=True)
class SyncReport:
    """Outcome of a full run over every selected source."""

    sources: list[SourceReport] = field(default_factory=list[SourceReport])

    @property
    def inserted(self) -> int:
        return sum(source.inserted for source in self.sources)

    @property
    def failed_sources(self) -> list[SourceReport]:
        return [source for source in self.sources if not source.ok]
