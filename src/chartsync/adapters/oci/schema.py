"""Pydantic models for the OCI distribution API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

OCI_MANIFEST_MEDIA_TYPE = "application/vnd.oci.image.manifest.v1+json"
HELM_CHART_LAYER_MEDIA_TYPE = "application/vnd.cncf.helm.chart.content.v1.tar+gzip"
LEGACY_CHART_LAYER_MEDIA_TYPE = "application/tar+gzip"
CREATED_ANNOTATION = "org.opencontainers.image.created"


class OciBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TagList(OciBaseModel):
    name: str = ""
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _null_to_empty(cls, value: object) -> object:
        return [] if value is None else value


class Descriptor(OciBaseModel):
    media_type: str = Field(alias="mediaType")
    digest: str
    size: int = 0
    annotations: dict[str, str] = Field(default_factory=dict)


class Manifest(OciBaseModel):
    schema_version: int = Field(default=2, alias="schemaVersion")
    media_type: str | None = Field(default=None, alias="mediaType")
    config: Descriptor | None = None
    layers: list[Descriptor] = Field(default_factory=list)
    annotations: dict[str, str] = Field(default_factory=dict)

    def chart_layer(self) -> Descriptor | None:
        for media_type in (HELM_CHART_LAYER_MEDIA_TYPE, LEGACY_CHART_LAYER_MEDIA_TYPE):
            for layer in self.layers:
                if layer.media_type == media_type:
                    return layer
        return None


class TokenResponse(OciBaseModel):
    token: str | None = None
    access_token: str | None = None

    @property
    def value(self) -> str | None:
        return self.token or self.access_token
