"""Failure kinds raised by the chart resolution pipeline."""

from __future__ import annotations


class RudderError(Exception):
    """Base error for repository, index, and chart archive failures."""


class FetchError(RudderError):
    """Raised by fetch callables handed to the chart cache when a remote read fails."""

    def __init__(self, url: str, reason: str = "") -> None:
        message = f"unable to fetch url={url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.url = url


class RepositoryNotFoundError(RudderError):
    def __init__(self, repo_name: str) -> None:
        super().__init__(f"repository not found: {repo_name}")
        self.repo_name = repo_name


class IndexFetchError(RudderError):
    def __init__(self, repo_name: str, url: str) -> None:
        super().__init__(f"unable to fetch index for repository={repo_name} url={url}")
        self.repo_name = repo_name
        self.url = url


class IndexDecodeError(RudderError):
    def __init__(self, repo_name: str, url: str, reason: str = "") -> None:
        message = f"unable to decode index for repository={repo_name} url={url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.repo_name = repo_name
        self.url = url


class ChartNotFoundError(RudderError):
    def __init__(self, repo_name: str, chart_name: str) -> None:
        super().__init__(f"chart not found: {repo_name}/{chart_name}")
        self.repo_name = repo_name
        self.chart_name = chart_name


class VersionNotFoundError(RudderError):
    def __init__(self, repo_name: str, chart_name: str, version: str) -> None:
        super().__init__(f"chart version not found: {repo_name}/{chart_name}:{version}")
        self.repo_name = repo_name
        self.chart_name = chart_name
        self.version = version


class ArchiveFetchError(RudderError):
    def __init__(self, url: str, reason: str = "") -> None:
        message = f"unable to fetch chart archive url={url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.url = url


class ArchiveDecodeError(RudderError):
    def __init__(self, url: str, reason: str = "") -> None:
        message = f"unable to read chart archive url={url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.url = url


class MetadataDecodeError(RudderError):
    def __init__(self, chart_name: str, path: str, reason: str = "") -> None:
        message = f"unable to decode chart metadata chart={chart_name} path={path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.chart_name = chart_name
        self.path = path


class ValuesDecodeError(RudderError):
    def __init__(self, chart_name: str, path: str, reason: str = "") -> None:
        message = f"unable to decode chart values chart={chart_name} path={path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.chart_name = chart_name
        self.path = path
