"""Version reconciliation engine.

One pass per source: retire applications that are no longer declared, list
the remote catalog, and for each application persist the versions not stored
yet in bounded batches before moving its latest flag. Failures are contained
at the narrowest scope that still lets the run progress: a version, an
application, or a source.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from chartsync.domain.errors import ArtifactFetchError, PersistenceError
from chartsync.domain.model import OciRegistry, SourceKind, utcnow

from .batching import VersionBatchWriter
from .diff import new_versions
from .fetch import fetch_bounded, fetch_sequential
from .inactive import deactivate_missing, resolve_application
from .latest import latest_candidate, swap_latest
from .options import ReconciliationOptions, SourceSelection
from .records import build_version_record
from .reports import ApplicationReport, SourceReport, SyncReport
from .selection import select_sources

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from chartsync.domain.model import (
        Application,
        CatalogVersion,
        ChartSource,
        VersionRecord,
    )
    from chartsync.domain.ports import (
        ArtifactSource,
        ArtifactSourceFactory,
        ChartSyncUnitOfWork,
    )

    type UnitOfWorkFactory = Callable[[], ChartSyncUnitOfWork]

log = getLogger(__name__)


class ReconciliationEngine:
    def __init__(
        self,
        *,
        unit_of_work_factory: UnitOfWorkFactory,
        artifact_sources: ArtifactSourceFactory,
        options: ReconciliationOptions | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._artifact_sources = artifact_sources
        self.options = options or ReconciliationOptions()
        self._clock = clock

    async def run(self, selection: SourceSelection | None = None) -> SyncReport:
        """Reconcile every selected source, one after the other."""

        selection = selection or SourceSelection()
        with self._uow_factory() as uow:
            sources = select_sources(uow.repositories.sources, selection)
        log.info("Reconciling %s sources (%s)", len(sources), selection)

        report = SyncReport()
        for source in sources:
            report.sources.append(await self.reconcile_source(source))

        log.info(
            "Reconciliation finished: %s sources, %s versions inserted, %s sources failed",
            len(report.sources),
            report.inserted,
            len(report.failed_sources),
        )
        return report

    async def reconcile_source(self, source: ChartSource) -> SourceReport:
        """Run one pass over ``source``; a failure is logged and reported, never raised."""

        report = SourceReport(ref=source.ref)
        log.info("Starting reconciliation of %s", source)
        with self._uow_factory() as uow:
            try:
                async with self._artifact_sources(source) as artifacts:
                    await self._reconcile_catalog(uow, artifacts, source, report)
            except Exception as exc:  # noqa: BLE001
                uow.rollback()
                report.error = str(exc) or type(exc).__name__
                log.exception("Reconciliation of %s failed", source)
        return report

    async def _reconcile_catalog(
        self,
        uow: ChartSyncUnitOfWork,
        artifacts: ArtifactSource,
        source: ChartSource,
        report: SourceReport,
    ) -> None:
        applications = uow.repositories.applications
        ref = source.ref

        if isinstance(source, OciRegistry):
            retired = deactivate_missing(
                applications, ref, source.declared_repositories, now=self._clock()
            )
            uow.commit()
            report.inactivated.extend(application.name for application in retired)

        listing = await artifacts.list_catalog()
        log.info("Listed %s charts from %s", len(listing), source)

        if (
            source.kind is SourceKind.CHART_REPO
            and self.options.inactivate_missing_chart_repo_apps
        ):
            retired = deactivate_missing(applications, ref, listing.keys(), now=self._clock())
            uow.commit()
            report.inactivated.extend(application.name for application in retired)

        known = {application.name: application for application in applications.find_by_source(ref)}
        for name, listed in listing.items():
            report.applications.append(
                await self._reconcile_application(uow, artifacts, source, name, listed, known)
            )

    async def _reconcile_application(
        self,
        uow: ChartSyncUnitOfWork,
        artifacts: ArtifactSource,
        source: ChartSource,
        name: str,
        listed: Sequence[CatalogVersion],
        known: dict[str, Application],
    ) -> ApplicationReport:
        report = ApplicationReport(name=name)
        try:
            application = resolve_application(
                uow.repositories.applications, source.ref, name, known, now=self._clock()
            )
            uow.commit()
            await self._sync_versions(uow, artifacts, source, application, listed, report)
        except Exception as exc:  # noqa: BLE001
            uow.rollback()
            report.error = str(exc) or type(exc).__name__
            log.exception("Reconciliation of %s in %s failed", name, source)
        return report

    async def _sync_versions(
        self,
        uow: ChartSyncUnitOfWork,
        artifacts: ArtifactSource,
        source: ChartSource,
        application: Application,
        listed: Sequence[CatalogVersion],
        report: ApplicationReport,
    ) -> None:
        versions = uow.repositories.versions
        application_id = application.id
        if application_id is None:
            raise PersistenceError(f"Application {application.name!r} was not assigned an id")

        persisted = {record.version for record in versions.find_by_application(application_id)}
        fresh = new_versions(listed, persisted)
        report.new_versions = len(fresh)

        if not fresh:
            if listed and self.options.repair_latest_on_unchanged:
                self._update_latest(uow, source, application, listed, report)
            else:
                log.debug("No new versions for %s", application.name)
            return

        log.info("Found %s new versions of %s in %s", len(fresh), application.name, source)

        def save(batch: Sequence[VersionRecord]) -> int:
            try:
                inserted = versions.save_batch(batch)
                uow.commit()
            except Exception as exc:
                uow.rollback()
                raise PersistenceError(
                    f"Saving {len(batch)} versions of {application.name!r} failed: {exc}"
                ) from exc
            return inserted

        async def fetch(version: CatalogVersion) -> VersionRecord:
            artifact = await artifacts.fetch_artifact(application.name, version)
            try:
                return build_version_record(
                    application_id, application.name, version, artifact, now=self._clock()
                )
            except (TypeError, ValueError) as exc:
                raise ArtifactFetchError(
                    f"Unusable metadata in {application.name} {version.version}: {exc}"
                ) from exc

        writer = VersionBatchWriter(
            save, chunk_size=self.options.chunk_size, label=f"{application.name} ({source.ref})"
        )
        limit = self.options.parallelism_limit
        if source.kind is SourceKind.OCI_REGISTRY and limit > 0:
            stats = await fetch_bounded(fresh, fetch, writer, limit=limit)
        else:
            stats = await fetch_sequential(fresh, fetch, writer)

        report.fetched = stats.fetched
        report.failed_versions = stats.failed
        report.inserted = writer.inserted
        if stats.failed:
            log.warning(
                "Skipped %s of %s new versions of %s",
                len(stats.failed),
                stats.attempted,
                application.name,
            )

        if writer.submitted > 0:
            self._update_latest(uow, source, application, listed, report)

    def _update_latest(
        self,
        uow: ChartSyncUnitOfWork,
        source: ChartSource,
        application: Application,
        listed: Sequence[CatalogVersion],
        report: ApplicationReport,
    ) -> None:
        versions = uow.repositories.versions
        candidate = latest_candidate(
            versions,
            application,
            remote_tags=[entry.version for entry in listed],
            tag_order=self.options.oci_tag_order,
        )
        try:
            changed = swap_latest(versions, application, candidate, now=self._clock())
            uow.commit()
        except Exception as exc:
            uow.rollback()
            raise PersistenceError(
                f"Updating the latest version of {application.name!r} failed: {exc}"
            ) from exc
        report.latest = candidate.version
        report.latest_changed = changed
        if changed:
            log.info("Latest version of %s is now %s", application.name, candidate.version)
