"""Settings of a reconciliation run."""

from __future__ import annotations

from dataclasses import dataclass

from chartsync.domain.model import TagOrder

from .batching import DEFAULT_CHUNK_SIZE


@dataclass(frozen=True, slots=True)
class ReconciliationOptions:
    """Tuning knobs of the engine.

    ``parallelism_limit`` of 0 keeps OCI fetches sequential; HTTP sources are
    always fetched sequentially.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    parallelism_limit: int = 0
    oci_tag_order: TagOrder = TagOrder.REGISTRY
    inactivate_missing_chart_repo_apps: bool = False
    repair_latest_on_unchanged: bool = False

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.parallelism_limit < 0:
            raise ValueError(f"parallelism_limit must be >= 0, got {self.parallelism_limit}")


@dataclass(frozen=True, slots=True)
class SourceSelection:
    """Which sources a run covers: everything, or one chart repo / OCI registry."""

    chart_repo_id: int | None = None
    oci_registry_id: str | None = None

    def __post_init__(self) -> None:
        if self.chart_repo_id is not None and self.oci_registry_id is not None:
            raise ValueError("Select either a chart repository or an OCI registry, not both")

    @property
    def select_all(self) -> bool:
        return self.chart_repo_id is None and self.oci_registry_id is None

    def __str__(self) -> str:
        if self.chart_repo_id is not None:
            return f"chart repo {self.chart_repo_id}"
        if self.oci_registry_id is not None:
            return f"OCI registry {self.oci_registry_id!r}"
        return "all sources"
