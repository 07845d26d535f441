"""Reading of packaged charts (gzipped tarballs)."""

from __future__ import annotations

import io
import json
import tarfile
from logging import getLogger
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any, Final, cast

import yaml

from chartsync.domain.errors import ArtifactFetchError
from chartsync.domain.model import ChartArtifact, ChartMetadata

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

log = getLogger(__name__)

# Prefer the C-accelerated YAML loader when available.
_YamlLoader = getattr(yaml, "CSafeLoader", yaml.SafeLoader)

CHART_FILE: Final = "chart.yaml"
VALUES_FILE: Final = "values.yaml"
README_FILE: Final = "readme.md"
SCHEMA_FILE: Final = "values.schema.json"
NOTES_PATH: Final = ("templates", "notes.txt")


class ChartArchiveError(ArtifactFetchError):
    """A chart archive is corrupt or lacks a readable ``Chart.yaml``."""


def load_yaml(text: str) -> object:
    return yaml.load(text, Loader=_YamlLoader)  # noqa: S506


def yaml_to_json(text: str) -> str:
    """Convert a YAML document to JSON; an empty document becomes ``{}``."""
    data = load_yaml(text)
    return json.dumps(data if data is not None else {}, default=str)


def _top_level_files(payload: bytes) -> dict[tuple[str, ...], str]:
    """Map lower-cased paths below the chart root to decoded file contents.

    Only the chart's own files are kept: everything below ``charts/`` belongs
    to subcharts.
    """

    files: dict[tuple[str, ...], str] = {}
    with tarfile.open(fileobj=io.BytesIO(payload), mode="r:gz") as archive:
        for member in archive.getmembers():
            if not member.isfile():
                continue
            parts = PurePosixPath(member.name).parts[1:]
            key = tuple(part.lower() for part in parts)
            if not key or key[0] == "charts":
                continue
            if len(key) > 1 and key != NOTES_PATH:
                continue
            handle = archive.extractfile(member)
            if handle is None:
                continue
            files.setdefault(key, handle.read().decode("utf-8"))
    return files


def _metadata(chart: Mapping[str, Any]) -> ChartMetadata:
    def text(key: str) -> str | None:
        value = chart.get(key)
        return None if value is None else str(value)

    return ChartMetadata(
        name=text("name") or "",
        version=text("version") or "",
        app_version=text("appVersion"),
        description=text("description"),
        icon=text("icon"),
        home=text("home"),
        deprecated=bool(chart.get("deprecated", False)),
        raw=dict(chart),
    )


def read_chart_archive(
    payload: bytes,
    *,
    digest: str | None = None,
    created: datetime | None = None,
) -> ChartArtifact:
    """Extract values, readme, schema, notes and metadata from a chart package."""

    try:
        files = _top_level_files(payload)
        chart_source = files.get((CHART_FILE,))
        if chart_source is None:
            raise ChartArchiveError("Chart archive has no Chart.yaml")
        chart = load_yaml(chart_source)
        if not isinstance(chart, dict):
            raise ChartArchiveError("Chart.yaml is not a mapping")
        raw_values = files.get((VALUES_FILE,), "")
        values_json = yaml_to_json(raw_values)
    except (tarfile.TarError, OSError, EOFError) as exc:
        raise ChartArchiveError(f"Corrupt chart archive: {exc}") from exc
    except (yaml.YAMLError, TypeError, ValueError) as exc:
        raise ChartArchiveError(f"Unreadable chart file: {exc}") from exc

    metadata = _metadata(cast(dict[str, Any], chart))
    log.debug("Read chart archive %s %s", metadata.name, metadata.version)
    return ChartArtifact(
        metadata=metadata,
        raw_values=raw_values,
        values_json=values_json,
        readme=files.get((README_FILE,), ""),
        values_schema_json=files.get((SCHEMA_FILE,), ""),
        notes=files.get(NOTES_PATH, ""),
        digest=digest,
        created=created,
    )
