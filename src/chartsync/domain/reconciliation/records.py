"""Conversion of fetched artifacts into version records."""

from __future__ import annotations

import json
from datetime import UTC
from typing import TYPE_CHECKING

from chartsync.domain.model import VersionRecord

if TYPE_CHECKING:
    from datetime import datetime

    from chartsync.domain.model import ApplicationId, CatalogVersion, ChartArtifact


def effective_created(value: datetime | None, *, now: datetime) -> datetime:
    """Source creation time, or ``now`` when the source reports none (or year 1)."""

    if value is None or value.year <= 1:
        return now
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def build_version_record(
    application_id: ApplicationId,
    application_name: str,
    listed: CatalogVersion,
    artifact: ChartArtifact,
    *,
    now: datetime,
) -> VersionRecord:
    metadata = artifact.metadata
    chart_yaml = json.dumps(dict(listed.entry or metadata.raw), default=str, sort_keys=True)
    return VersionRecord(
        application_id=application_id,
        version=listed.version,
        name=metadata.name or application_name,
        app_version=metadata.app_version,
        description=metadata.description,
        digest=artifact.digest or listed.digest,
        icon=metadata.icon,
        home=metadata.home,
        deprecated=metadata.deprecated,
        values_yaml=artifact.values_json,
        chart_yaml=chart_yaml,
        raw_values=artifact.raw_values,
        readme=artifact.readme,
        values_schema_json=artifact.values_schema_json,
        notes=artifact.notes,
        latest=False,
        created=effective_created(artifact.created or listed.created, now=now),
        created_on=now,
        updated_on=now,
    )
