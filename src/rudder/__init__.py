"""Rudder chart repository resolver."""

from .config import AppConfig, load_config
from .controller import RepoController
from .errors import RudderError
from .schemas import ChartDetail, ChartIndex, ChartMetadata, ChartVersion, RepositoryEntry

__all__ = [
    "AppConfig",
    "ChartDetail",
    "ChartIndex",
    "ChartMetadata",
    "ChartVersion",
    "RepoController",
    "RepositoryEntry",
    "RudderError",
    "load_config",
]
