from __future__ import annotations

from rudder.schemas import ChartIndex, ChartVersion


def filter_charts(index: ChartIndex, predicate: str) -> ChartIndex:
    if not predicate:
        return index

    filtered: ChartIndex = {}
    for chart_name, versions in index.items():
        if chart_name == predicate or any(_matches(version, predicate) for version in versions):
            filtered[chart_name] = versions
    return filtered


def _matches(version: ChartVersion, predicate: str) -> bool:
    return version.name == predicate or predicate in version.keywords
