"""Ports for persisting sources, applications and versions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chartsync.domain.model import (
        Application,
        ApplicationId,
        ChartRepoId,
        ChartRepository,
        OciRegistry,
        OciRegistryId,
        SourceRef,
        VersionRecord,
    )


@runtime_checkable
class SourceRepository(Protocol):
    """Read access to the configured chart providers."""

    def chart_repositories(self, repo_id: ChartRepoId | None = None) -> list[ChartRepository]:
        """Active, non-deleted chart repositories (optionally only ``repo_id``)."""
        ...

    def oci_registries(self, registry_id: OciRegistryId | None = None) -> list[OciRegistry]:
        """Active OCI registries (optionally only ``registry_id``)."""
        ...


@runtime_checkable
class ApplicationRepository(Protocol):
    def find_by_source(self, ref: SourceRef) -> list[Application]:
        """All applications of a source, active and inactive."""
        ...

    def find_inactive_by_name(self, ref: SourceRef, name: str) -> Application | None: ...

    def save(self, application: Application) -> Application:
        """Insert, or return the existing row for the same (source, name)."""
        ...

    def update(self, applications: Sequence[Application]) -> None: ...


@runtime_checkable
class VersionRepository(Protocol):
    def find_by_application(self, application_id: ApplicationId) -> list[VersionRecord]: ...

    def save_batch(self, records: Sequence[VersionRecord]) -> int:
        """Insert records, silently skipping existing (application, version) pairs.

        Returns the number of rows actually inserted.
        """
        ...

    def find_latest(self, application_id: ApplicationId) -> list[VersionRecord]:
        """Records currently flagged latest; normally zero or one."""
        ...

    def find_most_recently_created(self, application_id: ApplicationId) -> VersionRecord | None: ...

    def find_by_application_and_version(
        self, application_id: ApplicationId, version: str
    ) -> VersionRecord | None: ...

    def update(self, records: Sequence[VersionRecord]) -> None: ...
