from __future__ import annotations

import base64
import io
import tarfile
import zlib
from collections.abc import Mapping
from pathlib import PurePosixPath
from typing import Any

import yaml
from pydantic import ValidationError

from rudder.errors import ArchiveDecodeError, MetadataDecodeError, ValuesDecodeError
from rudder.schemas import ChartMetadata

CHART_FILE_NAME = "Chart.yaml"
VALUES_FILE_NAME = "values.yaml"
TEMPLATES_DIR_NAME = "templates"


def extract_archive(data: bytes, *, source: str = "") -> dict[str, bytes]:
    """Unpack a (possibly compressed) tarball into ``{member path: bytes}``."""
    files: dict[str, bytes] = {}
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as archive:
            for member in archive:
                if not member.isfile():
                    continue
                handle = archive.extractfile(member)
                if handle is None:
                    continue
                files[member.name] = handle.read()
    except (tarfile.TarError, EOFError, zlib.error, OSError) as exc:
        raise ArchiveDecodeError(source, reason=str(exc)) from exc
    return files


def template_path(member_path: str) -> str | None:
    """Path relative to the ``templates`` directory, or None outside of it.

    ``mypkg/templates/tests/pod.yaml`` -> ``tests/pod.yaml``.
    """
    parts = PurePosixPath(member_path).parts
    for position, part in enumerate(parts[1:], start=1):
        if part == TEMPLATES_DIR_NAME:
            remainder = parts[position + 1 :]
            if not remainder:
                return None
            return "/".join(remainder)
    return None


def collect_templates(files: Mapping[str, bytes]) -> dict[str, str]:
    templates: dict[str, str] = {}
    for member_path, content in files.items():
        relative = template_path(member_path)
        if relative is None:
            continue
        templates[relative] = encode_binary(content)
    return templates


def decode_chart_metadata(files: Mapping[str, bytes], chart_name: str) -> ChartMetadata:
    path = f"{chart_name}/{CHART_FILE_NAME}"
    data = files.get(path)
    if data is None:
        raise MetadataDecodeError(chart_name, path, reason="file not found in archive")
    try:
        payload = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise MetadataDecodeError(chart_name, path, reason=str(exc)) from exc
    if not isinstance(payload, dict):
        raise MetadataDecodeError(chart_name, path, reason="document root must be a mapping")
    try:
        return ChartMetadata.model_validate(payload)
    except ValidationError as exc:
        raise MetadataDecodeError(chart_name, path, reason=str(exc)) from exc


def decode_values(files: Mapping[str, bytes], chart_name: str) -> tuple[dict[str, Any], bytes]:
    """Return the decoded values tree together with the raw file bytes."""
    path = f"{chart_name}/{VALUES_FILE_NAME}"
    data = files.get(path)
    if data is None:
        raise ValuesDecodeError(chart_name, path, reason="file not found in archive")
    try:
        payload = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise ValuesDecodeError(chart_name, path, reason=str(exc)) from exc
    # values.yaml holding only comments is a valid, empty configuration
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValuesDecodeError(chart_name, path, reason="document root must be a mapping")
    return _stringify_keys(payload), data


def encode_binary(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _stringify_keys(value: Any) -> Any:
    # keeps the tree JSON-serializable; YAML allows int and bool mapping keys
    if isinstance(value, dict):
        return {str(key): _stringify_keys(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_stringify_keys(item) for item in value]
    return value
