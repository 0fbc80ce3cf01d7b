from __future__ import annotations

import json
import logging
from pathlib import Path

import typer

from rudder import RepoController, RudderError, load_config
from rudder.charts import LATEST
from rudder.schemas import ChartIndex
from rudder.storage import ChartCache

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = typer.Typer(help="Rudder chart repository CLI")
debug_app = typer.Typer(help="Debug commands")
app.add_typer(debug_app, name="debug")

_CONFIG_OPTION = typer.Option(
    Path("config/rudder.example.yaml"),
    "--config",
    help="Config file path.",
    exists=True,
    dir_okay=False,
    readable=True,
)


@app.command("repos")
def list_repos(config_path: Path = _CONFIG_OPTION) -> None:
    """List configured chart repositories."""
    controller = _build_controller(config_path)
    repos = controller.list_repos()
    if not repos:
        typer.echo("no repositories configured")
        return

    headers = ("name", "url")
    rows = [(repo.name, repo.url) for repo in repos]
    typer.echo(_render_table(headers=headers, rows=rows))


@app.command("charts")
def list_charts(
    repo_name: str = typer.Option(..., "--repo", help="Repository name."),
    filter_value: str = typer.Option(
        "",
        "--filter",
        help="Keep charts whose name, version name, or keyword equals this value.",
    ),
    config_path: Path = _CONFIG_OPTION,
) -> None:
    """List charts published by a repository."""
    controller = _build_controller(config_path)
    try:
        charts = controller.list_charts(repo_name, filter_value)
    except RudderError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(_render_chart_table(charts))
    typer.echo(f"charts={len(charts)} repo={repo_name}")


@app.command("chart")
def chart_details(
    repo_name: str = typer.Option(..., "--repo", help="Repository name."),
    chart_name: str = typer.Option(..., "--name", "-n", help="Chart name."),
    version: str = typer.Option(LATEST, "--version", help="Chart version or 'latest'."),
    json_out: Path | None = typer.Option(
        None,
        "--json-out",
        help="Optional output path for the chart detail JSON.",
    ),
    config_path: Path = _CONFIG_OPTION,
) -> None:
    """Show chart metadata, values, and templates for one chart version."""
    controller = _build_controller(config_path)
    try:
        detail = controller.chart_details(repo_name, chart_name, version)
    except RudderError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    metadata = detail.metadata
    typer.echo(
        f"chart={metadata.name} version={metadata.version} "
        f"app_version={metadata.app_version or '-'} "
        f"values_keys={len(detail.values)} templates={len(detail.templates)}"
    )
    for template_name in sorted(detail.templates):
        typer.echo(f"  {template_name}")

    if json_out is not None:
        json_out.parent.mkdir(parents=True, exist_ok=True)
        payload = detail.model_dump(mode="json", by_alias=True)
        json_out.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        typer.echo(f"json_out={json_out}")


@debug_app.command("cache")
def debug_cache(
    cache_dir: Path = typer.Option(
        Path("data/cache/charts"),
        "--cache-dir",
        help="Chart cache directory.",
    ),
) -> None:
    """Run chart cache smoke test."""
    calls: list[str] = []

    def _fetch(url: str) -> bytes:
        calls.append(url)
        return b"smoke_ok"

    cache = ChartCache(cache_dir, lifetime_seconds=60, fetch_bytes=_fetch)
    url = "debug://cache/smoke"
    cache.path_for(url).unlink(missing_ok=True)

    first = cache.fetch(url)
    second = cache.fetch(url)
    if first != b"smoke_ok" or second != first or len(calls) != 1:
        typer.echo("cache smoke test failed", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"cache ok path={cache.path_for(url)}")


def _build_controller(config_path: Path) -> RepoController:
    try:
        config = load_config(config_path)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    return RepoController.from_config(config)


def _render_chart_table(charts: ChartIndex) -> str:
    if not charts:
        return "no charts found"

    headers = ("chart", "latest", "versions", "keywords")
    rows = []
    for chart_name in sorted(charts):
        versions = charts[chart_name]
        latest = versions[0] if versions else None
        rows.append(
            (
                chart_name,
                latest.version if latest else "-",
                str(len(versions)),
                _truncate(",".join(latest.keywords) if latest else "", limit=48) or "-",
            )
        )
    return _render_table(headers=headers, rows=rows)


def _render_table(*, headers: tuple[str, ...], rows: list[tuple[str, ...]]) -> str:
    widths = [
        max(len(headers[column]), *(len(row[column]) for row in rows))
        for column in range(len(headers))
    ]

    def _line(values: tuple[str, ...]) -> str:
        return " | ".join(
            value.ljust(widths[index]) for index, value in enumerate(values)
        )

    divider = "-+-".join("-" * width for width in widths)
    body = [_line(headers), divider]
    body.extend(_line(row) for row in rows)
    return "\n".join(body)


def _truncate(text: str, *, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[: limit - 3]}..."


def main() -> None:
    """CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
