"""Locally mirrored catalog entities: applications and their versions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chartsync.domain.model.enums import SourceKind
from chartsync.domain.model.primitives import (
    ApplicationId,
    ChartRepoId,
    OciRegistryId,
    SourceRef,
    utcnow,
)

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class Application:
    """A named chart mirrored from exactly one source.

    Rows are never deleted; an application that disappears upstream is
    flagged inactive and reactivated on the same row if it comes back.
    """

    name: str
    chart_repo_id: ChartRepoId | None = None
    oci_registry_id: OciRegistryId | None = None
    active: bool = True
    created_on: datetime = field(default_factory=utcnow)
    updated_on: datetime = field(default_factory=utcnow)
    id: ApplicationId | None = None

    def __post_init__(self) -> None:
        if (self.chart_repo_id is None) == (self.oci_registry_id is None):
            raise ValueError(
                f"Application {self.name!r} must reference exactly one chart repo or OCI registry"
            )

    @classmethod
    def for_source(cls, ref: SourceRef, name: str, *, now: datetime | None = None) -> Application:
        timestamp = now or utcnow()
        if ref.kind is SourceKind.CHART_REPO:
            return cls(
                name=name, chart_repo_id=int(ref.id), created_on=timestamp, updated_on=timestamp
            )
        return cls(
            name=name, oci_registry_id=str(ref.id), created_on=timestamp, updated_on=timestamp
        )

    @property
    def source_ref(self) -> SourceRef:
        if self.chart_repo_id is not None:
            return SourceRef(SourceKind.CHART_REPO, self.chart_repo_id)
        if self.oci_registry_id is None:
            raise ValueError(f"Application {self.name!r} has no source")
        return SourceRef(SourceKind.OCI_REGISTRY, self.oci_registry_id)

    def deactivate(self, *, now: datetime | None = None) -> None:
        self.active = False
        self.updated_on = now or utcnow()

    def reactivate(self, *, now: datetime | None = None) -> None:
        self.active = True
        self.updated_on = now or utcnow()


@dataclass(eq=False, kw_only=True)
class VersionRecord:
    """Snapshot of one published chart version.

    Immutable once stored, except for the ``latest`` flag.
    """

    application_id: ApplicationId
    version: str
    name: str = ""
    app_version: str | None = None
    description: str | None = None
    digest: str | None = None
    icon: str | None = None
    home: str | None = None
    deprecated: bool = False
    values_yaml: str | None = None
    chart_yaml: str | None = None
    raw_values: str | None = None
    readme: str | None = None
    values_schema_json: str | None = None
    notes: str | None = None
    latest: bool = False
    created: datetime = field(default_factory=utcnow)
    created_on: datetime = field(default_factory=utcnow)
    updated_on: datetime = field(default_factory=utcnow)
    id: int | None = None

    def mark_latest(self, *, now: datetime | None = None) -> None:
        self.latest = True
        self.updated_on = now or utcnow()

    def unmark_latest(self, *, now: datetime | None = None) -> None:
        self.latest = False
        self.updated_on = now or utcnow()
