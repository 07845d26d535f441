"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from chartsync.adapters.sources import ArtifactSources
from chartsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyChartSyncUnitOfWork,
    is_started,
    startup,
)
from chartsync.config import get_sync_config
from chartsync.domain.ports.unit_of_work import ChartSyncUnitOfWork
from chartsync.domain.reconciliation import ReconciliationEngine

if TYPE_CHECKING:
    from chartsync.config import SyncConfig
    from chartsync.domain.ports import ArtifactSourceFactory
    from chartsync.domain.reconciliation import SyncReport

UnitOfWorkFactory = Callable[[], ChartSyncUnitOfWork]


log = getLogger(__name__)


def sync_chart_sources(
    config: SyncConfig | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    artifact_sources: ArtifactSourceFactory | None = None,
) -> SyncReport:
    """Mirror chart versions of the configured sources into the database."""

    effective_config = config or get_sync_config()
    if unit_of_work_factory is None and not is_started():
        startup()
    effective_uow = unit_of_work_factory or SqlAlchemyChartSyncUnitOfWork
    options = effective_config.options
    log.info(
        "Starting chart sync: sources=%s, chunk_size=%s, parallelism=%s, tag_order=%s",
        effective_config.selection,
        options.chunk_size,
        options.parallelism_limit,
        options.oci_tag_order,
    )

    engine = ReconciliationEngine(
        unit_of_work_factory=effective_uow,
        artifact_sources=artifact_sources or ArtifactSources(),
        options=options,
    )
    report = asyncio.run(engine.run(effective_config.selection))

    log.info(
        f"Finished chart sync: sources={len(report.sources)}, inserted={report.inserted}, "
        f"failed_sources={len(report.failed_sources)}"
    )
    return report
