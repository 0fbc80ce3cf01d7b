from __future__ import annotations

import base64

import pytest

from chart_fixtures import DEPLOYMENT_YAML, VALUES_YAML, FakeFetch, build_chart_archive
from rudder import AppConfig, RepoController
from rudder.errors import (
    ArchiveDecodeError,
    ArchiveFetchError,
    ChartNotFoundError,
    FetchError,
    IndexFetchError,
    MetadataDecodeError,
    RepositoryNotFoundError,
    VersionNotFoundError,
)
from rudder.remote import HttpFetcher
from rudder.schemas import RepositoryEntry
from rudder.storage import ChartCache

REPO_URL = "https://charts.example.com"
INDEX_URL = f"{REPO_URL}/index.yaml"
MYPKG_URL = f"{REPO_URL}/mypkg-1.2.0.tgz"
MYPKG_OLD_URL = f"{REPO_URL}/mypkg-1.1.0.tgz"

INDEX = f"""apiVersion: v1
entries:
  mypkg:
    - name: mypkg
      version: 1.2.0
      keywords: [web]
      urls: ["{MYPKG_URL}"]
    - name: mypkg
      version: 1.1.0
      keywords: [web]
      urls: ["{MYPKG_OLD_URL}"]
  redis:
    - name: redis
      version: 2.0.0
      keywords: [db]
      urls: ["{REPO_URL}/redis-2.0.0.tgz"]
  nourls:
    - name: nourls
      version: 0.1.0
""".encode()


def _controller(tmp_path, responses: dict[str, bytes | Exception]) -> tuple[RepoController, FakeFetch]:
    fetch = FakeFetch(responses)
    cache = ChartCache(tmp_path / "cache", lifetime_seconds=600, fetch_bytes=fetch)
    repos = [
        RepositoryEntry(name="stable", url=REPO_URL),
        RepositoryEntry(name="other", url="https://other.example.com"),
    ]
    return RepoController(repos, cache=cache), fetch


def test_list_repos_returns_configured_entries(tmp_path) -> None:
    controller, fetch = _controller(tmp_path, {})

    assert [repo.name for repo in controller.list_repos()] == ["stable", "other"]
    assert fetch.urls == []


def test_list_charts_unknown_repository(tmp_path) -> None:
    controller, _ = _controller(tmp_path, {})

    with pytest.raises(RepositoryNotFoundError) as exc_info:
        controller.list_charts("missing")

    assert exc_info.value.repo_name == "missing"


def test_list_charts_with_filter(tmp_path) -> None:
    controller, fetch = _controller(tmp_path, {INDEX_URL: INDEX})

    assert list(controller.list_charts("stable")) == ["mypkg", "redis", "nourls"]
    assert list(controller.list_charts("stable", "db")) == ["redis"]
    assert fetch.urls == [INDEX_URL]


def test_list_charts_index_fetch_failure(tmp_path) -> None:
    controller, _ = _controller(tmp_path, {INDEX_URL: FetchError(INDEX_URL, reason="down")})

    with pytest.raises(IndexFetchError):
        controller.list_charts("stable")


def test_chart_details_latest(tmp_path) -> None:
    controller, fetch = _controller(
        tmp_path,
        {INDEX_URL: INDEX, MYPKG_URL: build_chart_archive()},
    )

    detail = controller.chart_details("stable", "mypkg")

    assert detail.metadata.name == "mypkg"
    assert detail.metadata.version == "1.2.0"
    assert detail.values["image"]["repository"] == "nginx"
    assert base64.b64decode(detail.values_raw) == VALUES_YAML
    assert set(detail.templates) == {"deployment.yaml", "tests/test-connection.yaml"}
    assert base64.b64decode(detail.templates["deployment.yaml"]) == DEPLOYMENT_YAML
    assert detail.chart_url == MYPKG_URL
    assert detail.chart_file == str(controller.cache.path_for(MYPKG_URL))
    assert fetch.urls == [INDEX_URL, MYPKG_URL]


def test_chart_details_exact_version_and_serialized_shape(tmp_path) -> None:
    controller, fetch = _controller(
        tmp_path,
        {INDEX_URL: INDEX, MYPKG_OLD_URL: build_chart_archive()},
    )

    detail = controller.chart_details("stable", "mypkg", "1.1.0")
    payload = detail.model_dump(mode="json", by_alias=True)

    assert fetch.urls[-1] == MYPKG_OLD_URL
    assert set(payload) == {"metadata", "values_raw", "values", "templates"}
    assert payload["metadata"]["appVersion"] == "2.4.1"


def test_chart_details_not_found_kinds(tmp_path) -> None:
    controller, _ = _controller(tmp_path, {INDEX_URL: INDEX})

    with pytest.raises(RepositoryNotFoundError):
        controller.chart_details("missing", "mypkg", "latest")
    with pytest.raises(ChartNotFoundError) as chart_exc:
        controller.chart_details("stable", "absent", "latest")
    with pytest.raises(VersionNotFoundError) as version_exc:
        controller.chart_details("stable", "mypkg", "9.9.9")

    assert chart_exc.value.chart_name == "absent"
    assert version_exc.value.version == "9.9.9"


def test_chart_details_without_download_urls(tmp_path) -> None:
    controller, _ = _controller(tmp_path, {INDEX_URL: INDEX})

    with pytest.raises(ArchiveFetchError):
        controller.chart_details("stable", "nourls", "latest")


def test_chart_details_archive_fetch_failure(tmp_path) -> None:
    controller, _ = _controller(
        tmp_path,
        {INDEX_URL: INDEX, MYPKG_URL: FetchError(MYPKG_URL, reason="500 error")},
    )

    with pytest.raises(ArchiveFetchError) as exc_info:
        controller.chart_details("stable", "mypkg", "latest")

    assert exc_info.value.url == MYPKG_URL


def test_chart_details_corrupt_archive(tmp_path) -> None:
    controller, _ = _controller(tmp_path, {INDEX_URL: INDEX, MYPKG_URL: b"garbage"})

    with pytest.raises(ArchiveDecodeError):
        controller.chart_details("stable", "mypkg", "latest")


def test_chart_details_archive_for_other_chart_name(tmp_path) -> None:
    controller, _ = _controller(
        tmp_path,
        {INDEX_URL: INDEX, MYPKG_URL: build_chart_archive("otherpkg")},
    )

    with pytest.raises(MetadataDecodeError):
        controller.chart_details("stable", "mypkg", "latest")


def test_from_config_builds_cache_and_fetcher(tmp_path) -> None:
    config = AppConfig.model_validate(
        {
            "repositories": [{"name": "stable", "url": REPO_URL}],
            "caching": {"directory": str(tmp_path / "charts"), "lifetime_minutes": 5},
            "http": {"timeout_seconds": 3.5},
        }
    )

    controller = RepoController.from_config(config)

    assert (tmp_path / "charts").is_dir()
    assert controller.cache.lifetime_seconds == 300
    assert controller.list_repos() == [RepositoryEntry(name="stable", url=REPO_URL)]
    fetcher = controller.cache.fetch_bytes.__self__
    assert isinstance(fetcher, HttpFetcher)
    assert fetcher.timeout_seconds == 3.5
    assert fetcher.session.headers["User-Agent"] == config.http.user_agent
