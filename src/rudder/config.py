from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from rudder.schemas import RepositoryEntry

DEFAULT_USER_AGENT = "rudder/0.1.0 (+https://github.com/rudder/rudder)"


class CachingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    directory: str = "data/cache/charts"
    lifetime_minutes: int = Field(default=10, ge=0)

    @field_validator("directory")
    @classmethod
    def validate_directory(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("caching.directory must not be empty")
        return normalized

    @property
    def lifetime_seconds(self) -> int:
        return self.lifetime_minutes * 60


class HttpConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timeout_seconds: float = Field(default=10.0, gt=0.0)
    user_agent: str = DEFAULT_USER_AGENT


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    repositories: list[RepositoryEntry] = Field(default_factory=list)
    caching: CachingConfig = Field(default_factory=CachingConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)

    @model_validator(mode="after")
    def validate_unique_repository_names(self) -> AppConfig:
        seen: set[str] = set()
        for entry in self.repositories:
            if entry.name in seen:
                raise ValueError(f"duplicate repository name: {entry.name}")
            seen.add(entry.name)
        return self


def load_config(path: str | Path) -> AppConfig:
    raw = Path(path).read_text(encoding="utf-8")
    payload = _parse_yaml_or_json(raw)
    try:
        return AppConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def _parse_yaml_or_json(raw: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        try:
            parsed = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid configuration: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Configuration root must be an object.")
    return parsed
