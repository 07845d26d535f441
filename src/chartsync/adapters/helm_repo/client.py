"""Artifact source reading an HTTP chart repository."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Self, cast
from urllib.parse import urljoin

import httpx
import yaml
from pydantic import ValidationError

from chartsync.adapters.chart_archive import load_yaml, read_chart_archive
from chartsync.adapters.http_resilience import (
    ClientFactory,
    ResilienceConfig,
    ResilientClient,
    default_client_factory,
)
from chartsync.config.http_resilience import get_timeout_seconds
from chartsync.domain.errors import ArtifactFetchError, SourceListingError
from chartsync.domain.model import CatalogListing, CatalogVersion, ChartRepository
from chartsync.domain.versions import sort_newest_first

from .schema import IndexEntry, IndexFile

if TYPE_CHECKING:
    from types import TracebackType

    from chartsync.domain.model import ChartArtifact

log = getLogger(__name__)

INDEX_FILE = "index.yaml"


def index_url(repository_url: str) -> str:
    return f"{repository_url.rstrip('/')}/{INDEX_FILE}"


def chart_url(repository_url: str, url: str) -> str:
    """Resolve an index entry URL, which may be relative to the repository."""
    return urljoin(f"{repository_url.rstrip('/')}/", url)


def _catalog_version(entry: IndexEntry) -> CatalogVersion:
    return CatalogVersion(
        version=entry.version,
        created=entry.created,
        digest=entry.digest,
        urls=tuple(entry.urls),
        entry=entry.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def parse_index(document: object, *, source: str = "") -> CatalogListing:
    """Turn a loaded ``index.yaml`` into a catalog listing, newest versions first.

    Invalid entries are skipped with a warning, as helm does.
    """

    if not isinstance(document, dict):
        raise SourceListingError(f"Index of {source} is not a mapping")
    try:
        index = IndexFile.model_validate(document)
    except ValidationError as exc:
        raise SourceListingError(f"Invalid index of {source}: {exc}") from exc

    listing: CatalogListing = {}
    for name, raw_entries in index.entries.items():
        entries: list[IndexEntry] = []
        for raw in raw_entries:
            try:
                entries.append(IndexEntry.model_validate(raw))
            except ValidationError as exc:
                log.warning("Skipping invalid index entry of %s in %s: %s", name, source, exc)
        if not entries:
            continue
        ordered = sort_newest_first(entries, key=lambda entry: entry.version)
        listing[name] = [_catalog_version(entry) for entry in ordered]
    return listing


@dataclass(slots=True)
class HelmRepositorySource:
    repository: ChartRepository
    resilience: ResilienceConfig | None = None
    client_factory: ClientFactory = default_client_factory
    _client: ResilientClient | None = field(default=None, init=False)

    def _resilience_config(self) -> ResilienceConfig:
        if self.resilience is not None:
            return self.resilience
        return ResilienceConfig(
            name=f"chart-repo-{self.repository.id}",
            timeout_seconds=get_timeout_seconds(),
            verify_tls=not self.repository.allow_insecure_connection,
        )

    def _auth(self) -> httpx.Auth | None:
        if not self.repository.has_credentials:
            return None
        return httpx.BasicAuth(
            cast(str, self.repository.username), cast(str, self.repository.password)
        )

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
            raise RuntimeError("HelmRepositorySource used outside of its context")
        return self._client

    async def list_catalog(self) -> CatalogListing:
        url = index_url(self.repository.url)
        log.info("Fetching index of %s from %s", self.repository, url)
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            document = load_yaml(response.text)
        except httpx.HTTPError as exc:
            raise SourceListingError(f"Fetching {url} failed: {exc}") from exc
        except yaml.YAMLError as exc:
            raise SourceListingError(f"Index at {url} is not valid YAML: {exc}") from exc
        return parse_index(document, source=str(self.repository))

    async def fetch_artifact(self, name: str, version: CatalogVersion) -> ChartArtifact:
        if not version.urls:
            raise ArtifactFetchError(f"{name} {version.version} has no download URL")
        try:
            url = chart_url(self.repository.url, version.urls[0])
            response = await self.client.get(url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise ArtifactFetchError(f"Downloading {name} {version.version} failed: {exc}") from exc
        return read_chart_archive(response.content, digest=version.digest, created=version.created)


if TYPE_CHECKING:
    from chartsync.domain.ports import ArtifactSource

    _source_check: ArtifactSource = HelmRepositorySource(
        ChartRepository(id=0, name="", url="")
    )
