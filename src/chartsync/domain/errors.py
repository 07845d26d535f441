"""Failures raised while reconciling a source.

Each error class maps to the scope it aborts: a single version, a single
application, or a whole source.
"""

from __future__ import annotations


class ReconciliationError(RuntimeError):
    """Base class for reconciliation failures."""


class SourceListingError(ReconciliationError):
    """The catalog of a source could not be enumerated."""


class ArtifactFetchError(ReconciliationError):
    """A single chart version could not be fetched or parsed."""


class PersistenceError(ReconciliationError):
    """A batch insert or update failed."""


class LatestPointerError(ReconciliationError):
    """The latest version of an application could not be determined."""
