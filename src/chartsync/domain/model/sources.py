"""Chart providers: HTTP chart repositories and OCI registries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from chartsync.domain.model.enums import SourceKind
from chartsync.domain.model.primitives import ChartRepoId, OciRegistryId, SourceRef


@dataclass(eq=False, kw_only=True)
class ChartRepository:
    """An HTTP chart repository serving an ``index.yaml``."""

    KIND: ClassVar[SourceKind] = SourceKind.CHART_REPO

    id: ChartRepoId
    name: str
    url: str
    username: str | None = None
    password: str | None = None
    allow_insecure_connection: bool = False
    active: bool = True
    deleted: bool = False

    @property
    def kind(self) -> SourceKind:
        return self.KIND

    @property
    def ref(self) -> SourceRef:
        return SourceRef(self.KIND, self.id)

    @property
    def has_credentials(self) -> bool:
        return bool(self.username) and bool(self.password)

    def __str__(self) -> str:
        return f"chart repo {self.name!r} ({self.id})"


@dataclass(eq=False, kw_only=True)
class OciRegistry:
    """An OCI registry with an explicit list of chart repositories to mirror."""

    KIND: ClassVar[SourceKind] = SourceKind.OCI_REGISTRY

    id: OciRegistryId
    registry_url: str
    repository_list: str = ""
    username: str | None = None
    password: str | None = None
    is_public: bool = False
    insecure: bool = False
    proxy_url: str | None = None
    active: bool = True

    @property
    def kind(self) -> SourceKind:
        return self.KIND

    @property
    def ref(self) -> SourceRef:
        return SourceRef(self.KIND, self.id)

    @property
    def declared_repositories(self) -> list[str]:
        """Chart names configured for this registry, in configuration order."""
        names: list[str] = []
        for raw in self.repository_list.split(","):
            name = raw.strip()
            if name and name not in names:
                names.append(name)
        return names

    @property
    def is_valid(self) -> bool:
        return bool(self.registry_url.strip()) and bool(self.declared_repositories)

    def __str__(self) -> str:
        return f"OCI registry {self.id!r}"


type ChartSource = ChartRepository | OciRegistry
