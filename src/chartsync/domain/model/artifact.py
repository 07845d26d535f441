"""Value objects describing what a chart source publishes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime


@dataclass(frozen=True, slots=True)
class CatalogVersion:
    """One version identifier as listed by a source.

    ``urls``, ``digest`` and ``created`` are only known for index based
    sources; OCI tag lists carry nothing but the tag.
    """

    version: str
    created: datetime | None = None
    digest: str | None = None
    urls: tuple[str, ...] = ()
    entry: Mapping[str, object] = field(default_factory=dict)


type CatalogListing = dict[str, list[CatalogVersion]]


@dataclass(frozen=True, slots=True)
class ChartMetadata:
    """Subset of ``Chart.yaml`` kept on a version record."""

    name: str
    version: str
    app_version: str | None = None
    description: str | None = None
    icon: str | None = None
    home: str | None = None
    deprecated: bool = False
    raw: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ChartArtifact:
    """Parsed payload of one chart version.

    ``values_json`` is ``raw_values`` converted from YAML to JSON.
    """

    metadata: ChartMetadata
    raw_values: str = ""
    values_json: str = ""
    readme: str = ""
    values_schema_json: str = ""
    notes: str = ""
    digest: str | None = None
    created: datetime | None = None
