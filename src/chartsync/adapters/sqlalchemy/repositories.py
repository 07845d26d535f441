"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite

from chartsync.adapters.sqlalchemy.mappings import (
    application_table,
    application_version_table,
    chart_repo_table,
    oci_registry_table,
)
from chartsync.domain.model import (
    Application,
    ChartRepository,
    OciRegistry,
    SourceKind,
    VersionRecord,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement
    from sqlalchemy.orm import Session

    from chartsync.domain.model import ApplicationId, ChartRepoId, OciRegistryId, SourceRef

log = getLogger(__name__)

_VERSION_KEY = ("application_id", "version")


class SqlAlchemySourceRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def chart_repositories(self, repo_id: ChartRepoId | None = None) -> list[ChartRepository]:
        stmt = (
            select(ChartRepository)
            .where(chart_repo_table.c.active.is_(True))
            .where(chart_repo_table.c.deleted.is_(False))
            .order_by(chart_repo_table.c.id)
        )
        if repo_id is not None:
            stmt = stmt.where(chart_repo_table.c.id == repo_id)
        return list(self.session.scalars(stmt))

    def oci_registries(self, registry_id: OciRegistryId | None = None) -> list[OciRegistry]:
        stmt = (
            select(OciRegistry)
            .where(oci_registry_table.c.active.is_(True))
            .order_by(oci_registry_table.c.id)
        )
        if registry_id is not None:
            stmt = stmt.where(oci_registry_table.c.id == registry_id)
        return list(self.session.scalars(stmt))


def _source_clause(ref: SourceRef) -> ColumnElement[bool]:
    if ref.kind is SourceKind.CHART_REPO:
        return application_table.c.chart_repo_id == ref.id
    return application_table.c.oci_registry_id == ref.id


class SqlAlchemyApplicationRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_source(self, ref: SourceRef) -> list[Application]:
        stmt = select(Application).where(_source_clause(ref)).order_by(application_table.c.id)
        return list(self.session.scalars(stmt))

    def find_inactive_by_name(self, ref: SourceRef, name: str) -> Application | None:
        stmt = (
            select(Application)
            .where(_source_clause(ref))
            .where(application_table.c.name == name)
            .where(application_table.c.active.is_(False))
        )
        return self.session.scalars(stmt).first()

    def save(self, application: Application) -> Application:
        stmt = (
            select(Application)
            .where(_source_clause(application.source_ref))
            .where(application_table.c.name == application.name)
        )
        existing = self.session.scalars(stmt).first()
        if existing is not None:
            return existing
        self.session.add(application)
        self.session.flush()
        log.debug("Created application %s (%s)", application.name, application.id)
        return application

    def update(self, applications: Sequence[Application]) -> None:
        self.session.add_all(applications)
        self.session.flush()


class SqlAlchemyVersionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_application(self, application_id: ApplicationId) -> list[VersionRecord]:
        stmt = (
            select(VersionRecord)
            .where(application_version_table.c.application_id == application_id)
            .order_by(application_version_table.c.id)
        )
        return list(self.session.scalars(stmt))

    def save_batch(self, records: Sequence[VersionRecord]) -> int:
        if not records:
            return 0
        rows = [_version_row(record) for record in records]
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            stmt = sqlite.insert(application_version_table).on_conflict_do_nothing(
                index_elements=list(_VERSION_KEY)
            )
        elif dialect == "postgresql":
            stmt = postgresql.insert(application_version_table).on_conflict_do_nothing(
                index_elements=list(_VERSION_KEY)
            )
        else:
            return self._insert_missing(rows)
        result = self.session.execute(stmt.values(rows))
        inserted = max(result.rowcount, 0)  # pyright: ignore[reportAttributeAccessIssue]
        if inserted < len(rows):
            log.debug("Ignored %s already stored versions", len(rows) - inserted)
        return inserted

    def _insert_missing(self, rows: list[dict[str, Any]]) -> int:
        keys = {(row["application_id"], row["version"]) for row in rows}
        application_ids = {application_id for application_id, _ in keys}
        existing = set(
            self.session.execute(
                select(
                    application_version_table.c.application_id,
                    application_version_table.c.version,
                ).where(application_version_table.c.application_id.in_(application_ids))
            ).tuples()
        )
        fresh: list[dict[str, Any]] = []
        for row in rows:
            key = (row["application_id"], row["version"])
            if key in existing:
                continue
            existing.add(key)
            fresh.append(row)
        if fresh:
            self.session.execute(application_version_table.insert(), fresh)
        return len(fresh)

    def find_latest(self, application_id: ApplicationId) -> list[VersionRecord]:
        stmt = (
            select(VersionRecord)
            .where(application_version_table.c.application_id == application_id)
            .where(application_version_table.c.latest.is_(True))
            .order_by(application_version_table.c.id)
        )
        return list(self.session.scalars(stmt))

    def find_most_recently_created(self, application_id: ApplicationId) -> VersionRecord | None:
        stmt = (
            select(VersionRecord)
            .where(application_version_table.c.application_id == application_id)
            .order_by(
                application_version_table.c.created.desc(),
                application_version_table.c.id.desc(),
            )
            .limit(1)
        )
        return self.session.scalars(stmt).first()

    def find_by_application_and_version(
        self, application_id: ApplicationId, version: str
    ) -> VersionRecord | None:
        stmt = (
            select(VersionRecord)
            .where(application_version_table.c.application_id == application_id)
            .where(application_version_table.c.version == version)
        )
        return self.session.scalars(stmt).first()

    def update(self, records: Sequence[VersionRecord]) -> None:
        self.session.add_all(records)
        self.session.flush()


def _version_row(record: VersionRecord) -> dict[str, Any]:
    return {
        "application_id": record.application_id,
        "version": record.version,
        "name": record.name,
        "app_version": record.app_version,
        "description": record.description,
        "digest": record.digest,
        "icon": record.icon,
        "home": record.home,
        "deprecated": record.deprecated,
        "values_yaml": record.values_yaml,
        "chart_yaml": record.chart_yaml,
        "raw_values": record.raw_values,
        "readme": record.readme,
        "values_schema_json": record.values_schema_json,
        "notes": record.notes,
        "latest": record.latest,
        "created": record.created,
        "created_on": record.created_on,
        "updated_on": record.updated_on,
    }
