"""Pydantic models describing a chart repository ``index.yaml``."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HelmBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class IndexEntry(HelmBaseModel):
    """One chart version as listed in the index."""

    name: str
    version: str
    app_version: str | None = Field(default=None, alias="appVersion")
    description: str | None = None
    created: datetime | None = None
    digest: str | None = None
    urls: list[str] = Field(default_factory=list[str])
    deprecated: bool = False

    @field_validator("version", "app_version", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> object:
        # unquoted versions such as 1.10 load as floats
        if isinstance(value, int | float):
            return str(value)
        return value


class IndexFile(HelmBaseModel):
    api_version: str | None = Field(default=None, alias="apiVersion")
    generated: datetime | None = None
    entries: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)
