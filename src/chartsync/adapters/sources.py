"""Selection of the artifact source implementation for a chart source."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from chartsync.adapters.helm_repo import HelmRepositorySource
from chartsync.adapters.http_resilience import ClientFactory, default_client_factory
from chartsync.adapters.oci import OciRegistrySource
from chartsync.domain.model import ChartRepository, OciRegistry

if TYPE_CHECKING:
    from chartsync.domain.model import ChartSource
    from chartsync.domain.ports import ArtifactSource


@dataclass(slots=True, frozen=True)
class ArtifactSources:
    """Builds the artifact source matching a chart source's kind."""

    client_factory: ClientFactory = default_client_factory

    def __call__(self, source: ChartSource) -> ArtifactSource:
        match source:
            case ChartRepository():
                return HelmRepositorySource(source, client_factory=self.client_factory)
            case OciRegistry():
                return OciRegistrySource(source, client_factory=self.client_factory)


if TYPE_CHECKING:
    from chartsync.domain.ports import ArtifactSourceFactory

    _factory_check: ArtifactSourceFactory = ArtifactSources()
