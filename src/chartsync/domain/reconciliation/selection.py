"""Resolution of the configured sources a run should reconcile."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chartsync.domain.model import ChartSource
    from chartsync.domain.ports import SourceRepository

    from .options import SourceSelection

log = getLogger(__name__)


def select_sources(repository: SourceRepository, selection: SourceSelection) -> list[ChartSource]:
    """Return the sources to reconcile, OCI registries first.

    Invalid OCI registries (blank URL or empty repository list) are dropped
    with an error log.
    """

    registries = []
    repositories = []
    if selection.select_all:
        registries = repository.oci_registries()
        repositories = repository.chart_repositories()
    elif selection.oci_registry_id is not None:
        registries = repository.oci_registries(selection.oci_registry_id)
    else:
        repositories = repository.chart_repositories(selection.chart_repo_id)

    sources: list[ChartSource] = []
    for registry in registries:
        if not registry.is_valid:
            log.error("Skipping %s: no registry URL or repository list configured", registry)
            continue
        sources.append(registry)
    sources.extend(repositories)

    if not sources and not selection.select_all:
        log.warning("No active source found for %s", selection)
    return sources
