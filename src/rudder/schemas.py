from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

TModel = TypeVar("TModel", bound=BaseModel)

logger = logging.getLogger(__name__)


class DTOBase(BaseModel):
    model_config = ConfigDict(extra="forbid")


class RemoteDocument(BaseModel):
    """Base for documents published by a chart repository; unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RepositoryEntry(DTOBase):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    url: str

    @field_validator("name", "url")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("repository name and url must not be empty")
        return normalized


class ChartVersion(RemoteDocument):
    name: str = ""
    version: str
    keywords: list[str] = Field(default_factory=list)
    urls: list[str] = Field(default_factory=list)
    description: str | None = None
    app_version: str | None = Field(default=None, alias="appVersion")
    api_version: str | None = Field(default=None, alias="apiVersion")
    created: str | None = None
    digest: str | None = None
    home: str | None = None
    icon: str | None = None
    sources: list[str] = Field(default_factory=list)
    deprecated: bool = False

    @field_validator("keywords", "urls", "sources", mode="before")
    @classmethod
    def default_null_lists(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("created", mode="before")
    @classmethod
    def normalize_created(cls, value: Any) -> Any:
        return _timestamp_text(value)

    @field_validator("version", "app_version", mode="before")
    @classmethod
    def stringify_version(cls, value: Any) -> Any:
        return _version_text(value)


ChartIndex = dict[str, list[ChartVersion]]


class IndexFile(RemoteDocument):
    api_version: str | None = Field(default=None, alias="apiVersion")
    generated: str | None = None
    entries: ChartIndex = Field(default_factory=dict)

    @field_validator("generated", mode="before")
    @classmethod
    def normalize_generated(cls, value: Any) -> Any:
        return _timestamp_text(value)

    @field_validator("entries", mode="before")
    @classmethod
    def default_null_entries(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {name: versions or [] for name, versions in value.items()}
        return value


class Maintainer(RemoteDocument):
    name: str = ""
    email: str | None = None
    url: str | None = None


class ChartMetadata(RemoteDocument):
    name: str
    version: str
    description: str | None = None
    home: str | None = None
    icon: str | None = None
    api_version: str | None = Field(default=None, alias="apiVersion")
    app_version: str | None = Field(default=None, alias="appVersion")
    kube_version: str | None = Field(default=None, alias="kubeVersion")
    keywords: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    maintainers: list[Maintainer] = Field(default_factory=list)
    engine: str | None = None
    condition: str | None = None
    tags: str | None = None
    deprecated: bool = False
    annotations: dict[str, Any] = Field(default_factory=dict)

    @field_validator("keywords", "sources", "maintainers", mode="before")
    @classmethod
    def default_null_lists(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("version", "app_version", mode="before")
    @classmethod
    def stringify_version(cls, value: Any) -> Any:
        return _version_text(value)


class ChartDetail(DTOBase):
    metadata: ChartMetadata
    values_raw: str
    values: dict[str, Any] = Field(default_factory=dict)
    templates: dict[str, str] = Field(default_factory=dict)
    chart_url: str = Field(exclude=True)
    chart_file: str = Field(exclude=True)


def json_schema_for(model_cls: type[TModel]) -> dict[str, Any]:
    return model_cls.model_json_schema()


def validate_json(model_cls: type[TModel], payload: str | bytes | bytearray) -> TModel:
    return model_cls.model_validate_json(payload)


def _version_text(value: Any) -> Any:
    # YAML reads bare versions such as 1.10 as floats; trailing zeros are already gone
    if isinstance(value, float):
        logger.debug("unquoted float version read as %s; trailing zeros may be lost", value)
        return str(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def _timestamp_text(value: Any) -> Any:
    # PyYAML turns unquoted timestamps into datetime; keep the published text form
    if isinstance(value, datetime):
        return value.isoformat()
    return value
