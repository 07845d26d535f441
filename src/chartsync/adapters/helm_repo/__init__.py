"""Artifact source for HTTP chart repositories."""

from __future__ import annotations

from .client import HelmRepositorySource, chart_url, index_url, parse_index
from .schema import IndexEntry, IndexFile

__all__ = [
    "HelmRepositorySource",
    "IndexEntry",
    "IndexFile",
    "chart_url",
    "index_url",
    "parse_index",
]
