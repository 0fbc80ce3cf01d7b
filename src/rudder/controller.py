from __future__ import annotations

import logging
from collections.abc import Iterable

import requests

from rudder.charts import (
    LATEST,
    collect_templates,
    decode_chart_metadata,
    decode_values,
    encode_binary,
    extract_archive,
    filter_charts,
    select_version,
)
from rudder.config import AppConfig
from rudder.errors import (
    ArchiveFetchError,
    ChartNotFoundError,
    RepositoryNotFoundError,
    VersionNotFoundError,
)
from rudder.remote import HttpFetcher, IndexResolver
from rudder.schemas import ChartDetail, ChartIndex, RepositoryEntry
from rudder.storage import FETCH_ERRORS, ChartCache

logger = logging.getLogger(__name__)


class RepoController:
    """Lists charts and loads chart details from the configured repositories."""

    def __init__(self, repositories: Iterable[RepositoryEntry], *, cache: ChartCache) -> None:
        self.repositories = tuple(repositories)
        self.cache = cache
        self.index_resolver = IndexResolver(cache)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        *,
        session: requests.Session | None = None,
    ) -> RepoController:
        fetcher = HttpFetcher(
            session=session,
            timeout_seconds=config.http.timeout_seconds,
            user_agent=config.http.user_agent,
        )
        cache = ChartCache(
            config.caching.directory,
            lifetime_seconds=config.caching.lifetime_seconds,
            fetch_bytes=fetcher.fetch_bytes,
        )
        return cls(config.repositories, cache=cache)

    def list_repos(self) -> list[RepositoryEntry]:
        return list(self.repositories)

    def find_repo(self, repo_name: str) -> RepositoryEntry:
        for repo in self.repositories:
            if repo.name == repo_name:
                return repo
        raise RepositoryNotFoundError(repo_name)

    def list_charts(self, repo_name: str, chart_filter: str = "") -> ChartIndex:
        try:
            repo = self.find_repo(repo_name)
        except RepositoryNotFoundError:
            logger.error("unable to find repo=%s", repo_name)
            raise

        charts = self.index_resolver.resolve(repo)
        return filter_charts(charts, chart_filter)

    def chart_details(
        self,
        repo_name: str,
        chart_name: str,
        version: str = LATEST,
    ) -> ChartDetail:
        charts = self.list_charts(repo_name)

        versions = charts.get(chart_name)
        if versions is None:
            logger.error("chart not found repo=%s chart=%s", repo_name, chart_name)
            raise ChartNotFoundError(repo_name, chart_name)

        selected = select_version(versions, version)
        if selected is None:
            logger.error("%s:%s not found repo=%s", chart_name, version, repo_name)
            raise VersionNotFoundError(repo_name, chart_name, version)

        if not selected.urls:
            raise ArchiveFetchError(
                f"{repo_name}/{chart_name}:{selected.version}",
                reason="no download urls listed",
            )
        chart_url = selected.urls[0]

        try:
            data = self.cache.fetch(chart_url)
        except FETCH_ERRORS as exc:
            logger.error("unable to get chart from cache or url=%s", chart_url)
            raise ArchiveFetchError(chart_url, reason=str(exc)) from exc

        files = extract_archive(data, source=chart_url)
        metadata = decode_chart_metadata(files, chart_name)
        values, values_raw = decode_values(files, chart_name)
        templates = collect_templates(files)

        logger.info(
            "chart loaded repo=%s chart=%s version=%s templates=%d",
            repo_name,
            chart_name,
            selected.version,
            len(templates),
        )
        return ChartDetail(
            metadata=metadata,
            values_raw=encode_binary(values_raw),
            values=values,
            templates=templates,
            chart_url=chart_url,
            chart_file=str(self.cache.path_for(chart_url)),
        )
