"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SourceKind(StrEnum):
    """Discriminator for the two kinds of chart providers."""

    CHART_REPO = "chart_repo"
    OCI_REGISTRY = "oci_registry"


class TagOrder(StrEnum):
    """How the newest tag of an OCI tag list is determined."""

    REGISTRY = "registry"  # first tag as returned by the registry
    SEMVER = "semver"
