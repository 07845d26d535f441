"""Reconciliation of remote chart catalogs into the local store."""

from __future__ import annotations

from .batching import DEFAULT_CHUNK_SIZE, VersionBatchWriter
from .diff import new_versions
from .engine import ReconciliationEngine
from .fetch import FetchStats, fetch_bounded, fetch_sequential
from .inactive import deactivate_missing, resolve_application
from .latest import latest_candidate, swap_latest
from .options import ReconciliationOptions, SourceSelection
from .records import build_version_record, effective_created
from .reports import ApplicationReport, SourceReport, SyncReport
from .selection import select_sources

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "ApplicationReport",
    "FetchStats",
    "ReconciliationEngine",
    "ReconciliationOptions",
    "SourceReport",
    "SourceSelection",
    "SyncReport",
    "VersionBatchWriter",
    "build_version_record",
    "deactivate_missing",
    "effective_created",
    "fetch_bounded",
    "fetch_sequential",
    "latest_candidate",
    "new_versions",
    "resolve_application",
    "select_sources",
    "swap_latest",
]
