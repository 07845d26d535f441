"""Artifact source for OCI registries."""

from __future__ import annotations

from .auth import RegistryTokenAuth, parse_challenge
from .client import OciRegistrySource, parse_created, registry_endpoint
from .schema import HELM_CHART_LAYER_MEDIA_TYPE, Manifest, TagList

__all__ = [
    "HELM_CHART_LAYER_MEDIA_TYPE",
    "Manifest",
    "OciRegistrySource",
    "RegistryTokenAuth",
    "TagList",
    "parse_challenge",
    "parse_created",
    "registry_endpoint",
]
