from __future__ import annotations

from collections.abc import Sequence

from rudder.schemas import ChartVersion

LATEST = "latest"


def select_version(versions: Sequence[ChartVersion], requested: str) -> ChartVersion | None:
    """Pick the record whose version equals ``requested``.

    ``"latest"`` resolves to the first record as listed by the repository,
    even when a record is literally versioned "latest". Returns ``None`` when
    nothing matches, including ``"latest"`` against an empty sequence.
    """
    if requested == LATEST:
        return versions[0] if versions else None

    for version in versions:
        if version.version == requested:
            return version
    return None
