"""Domain primitives: scalar aliases + small value objects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from chartsync.domain.model.enums import SourceKind

type ApplicationId = int
type ChartRepoId = int
type OciRegistryId = str


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class SourceRef:
    """Reference to the source an application belongs to.

    Chart repository ids are integers, OCI registry ids are strings; both are
    carried as their natural python type in ``id``.
    """

    kind: SourceKind
    id: ChartRepoId | OciRegistryId

    def __str__(self) -> str:
        return f"{self.kind}:{self.id}"
