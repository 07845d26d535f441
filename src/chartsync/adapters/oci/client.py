"""Artifact source reading charts from an OCI registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from logging import getLogger
from typing import TYPE_CHECKING, Self
from urllib.parse import urljoin, urlsplit

import httpx
from pydantic import ValidationError

from chartsync.adapters.chart_archive import read_chart_archive
from chartsync.adapters.http_resilience import (
    ClientFactory,
    ResilienceConfig,
    ResilientClient,
    default_client_factory,
)
from chartsync.config.http_resilience import get_timeout_seconds
from chartsync.domain.errors import ArtifactFetchError, SourceListingError
from chartsync.domain.model import CatalogListing, CatalogVersion, OciRegistry

from .auth import RegistryTokenAuth
from .schema import CREATED_ANNOTATION, OCI_MANIFEST_MEDIA_TYPE, Manifest, TagList

if TYPE_CHECKING:
    from types import TracebackType

    from chartsync.domain.model import ChartArtifact

log = getLogger(__name__)

TAG_PAGE_SIZE = 1000


def registry_endpoint(registry_url: str, *, insecure: bool = False) -> tuple[str, str]:
    """Split a registry URL into its base URL and an optional namespace prefix.

    ``ghcr.io/acme`` becomes ``("https://ghcr.io", "acme")``; a URL without a
    scheme uses plain HTTP only for insecure registries.
    """

    value = registry_url.strip()
    if "://" not in value:
        value = f"{'http' if insecure else 'https'}://{value}"
    parts = urlsplit(value)
    return f"{parts.scheme}://{parts.netloc}", parts.path.strip("/")


def parse_created(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        log.debug("Ignoring unparseable creation time %r", value)
        return None


@dataclass(slots=True)
class OciRegistrySource:
    registry: OciRegistry
    resilience: ResilienceConfig | None = None
    client_factory: ClientFactory = default_client_factory
    _client: ResilientClient | None = field(default=None, init=False)
    _base_url: str = field(default="", init=False)
    _prefix: str = field(default="", init=False)

    def __post_init__(self) -> None:
        self._base_url, self._prefix = registry_endpoint(
            self.registry.registry_url, insecure=self.registry.insecure
        )

    def _resilience_config(self) -> ResilienceConfig:
        if self.resilience is not None:
            return self.resilience
        return ResilienceConfig(
            name=f"oci-registry-{self.registry.id}",
            base_url=self._base_url,
            timeout_seconds=get_timeout_seconds(),
            verify_tls=not self.registry.insecure,
            proxy_url=self.registry.proxy_url or None,
        )

    def _auth(self) -> httpx.Auth:
        if self.registry.is_public:
            return RegistryTokenAuth()
        return RegistryTokenAuth(self.registry.username, self.registry.password)

    def repository_path(self, name: str) -> str:
        return f"{self._prefix}/{name}" if self._prefix else name

    def url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def __aenter__(self) -> Self:
        self._client = self.client_factory(self._resilience_config(), self._auth())
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> ResilientClient:
        if self._client is None:
            raise RuntimeError("OciRegistrySource used outside of its context")
        return self._client

    async def list_tags(self, name: str) -> list[str]:
        """Return every tag of ``name`` in registry order, following ``Link`` pagination."""

        tags: list[str] = []
        seen: set[str] = set()
        next_url: str | None = self.url(f"/v2/{self.repository_path(name)}/tags/list")
        params: dict[str, int] | None = {"n": TAG_PAGE_SIZE}
        while next_url:
            response = await self.client.get(next_url, params=params)
            response.raise_for_status()
            page = TagList.model_validate_json(response.content)
            for tag in page.tags:
                if tag not in seen:
                    seen.add(tag)
                    tags.append(tag)
            link = response.links.get("next", {}).get("url")
            next_url = urljoin(next_url, link) if link else None
            params = None
        return tags

    async def list_catalog(self) -> CatalogListing:
        listing: CatalogListing = {}
        declared = self.registry.declared_repositories
        failures = 0
        for name in declared:
            try:
                tags = await self.list_tags(name)
            except (httpx.HTTPError, ValidationError) as exc:
                failures += 1
                log.error("Listing tags of %s in %s failed: %s", name, self.registry, exc)
                continue
            if not tags:
                log.warning("No tags found for %s in %s", name, self.registry)
                continue
            listing[name] = [CatalogVersion(version=tag) for tag in tags]

        if declared and failures == len(declared):
            raise SourceListingError(f"Could not list any repository of {self.registry}")
        return listing

    async def fetch_artifact(self, name: str, version: CatalogVersion) -> ChartArtifact:
        path = self.repository_path(name)
        try:
            response = await self.client.get(
                self.url(f"/v2/{path}/manifests/{version.version}"),
                headers={"Accept": OCI_MANIFEST_MEDIA_TYPE},
            )
            response.raise_for_status()
            manifest = Manifest.model_validate_json(response.content)
            layer = manifest.chart_layer()
            if layer is None:
                raise ArtifactFetchError(f"{name}:{version.version} has no helm chart layer")
            blob = await self.client.get(self.url(f"/v2/{path}/blobs/{layer.digest}"))
            blob.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL, ValidationError) as exc:
            raise ArtifactFetchError(f"Fetching {name}:{version.version} failed: {exc}") from exc

        created = parse_created(
            manifest.annotations.get(CREATED_ANNOTATION)
            or layer.annotations.get(CREATED_ANNOTATION)
        )
        return read_chart_archive(blob.content, digest=layer.digest, created=created)


if TYPE_CHECKING:
    from chartsync.domain.ports import ArtifactSource

    _source_check: ArtifactSource = OciRegistrySource(OciRegistry(id="", registry_url=""))
