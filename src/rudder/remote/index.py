from __future__ import annotations

import logging

import yaml
from pydantic import ValidationError

from rudder.errors import IndexDecodeError, IndexFetchError
from rudder.schemas import ChartIndex, IndexFile, RepositoryEntry
from rudder.storage import FETCH_ERRORS, ChartCache

logger = logging.getLogger(__name__)

INDEX_FILE_NAME = "index.yaml"


def index_url(repo_url: str) -> str:
    base = repo_url[:-1] if repo_url.endswith("/") else repo_url
    return f"{base}/{INDEX_FILE_NAME}"


def decode_index(data: bytes) -> IndexFile:
    """Decode an ``index.yaml`` document; raises ``ValueError`` when malformed."""
    try:
        payload = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid yaml: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError("index root must be a mapping")
    try:
        return IndexFile.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(str(exc)) from exc


class IndexResolver:
    def __init__(self, cache: ChartCache) -> None:
        self.cache = cache

    def resolve(self, repo: RepositoryEntry) -> ChartIndex:
        url = index_url(repo.url)
        try:
            data = self.cache.fetch(url)
        except FETCH_ERRORS as exc:
            logger.error("unable to get index from cache or url=%s repo=%s", url, repo.name)
            raise IndexFetchError(repo.name, url) from exc

        try:
            index = decode_index(data)
        except ValueError as exc:
            logger.error("unable to parse index repo=%s url=%s", repo.name, url)
            raise IndexDecodeError(repo.name, url, reason=str(exc)) from exc

        logger.info("index resolved repo=%s charts=%d", repo.name, len(index.entries))
        return index.entries
