"""Disk cache for repository indexes and chart archives."""

from .cache import FETCH_ERRORS, ChartCache, FetchBytes

__all__ = ["FETCH_ERRORS", "ChartCache", "FetchBytes"]
