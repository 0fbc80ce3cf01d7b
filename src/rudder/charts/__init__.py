"""Chart selection, filtering, and archive decoding."""

from .archive import (
    collect_templates,
    decode_chart_metadata,
    decode_values,
    encode_binary,
    extract_archive,
    template_path,
)
from .filter import filter_charts
from .versions import LATEST, select_version

__all__ = [
    "LATEST",
    "collect_templates",
    "decode_chart_metadata",
    "decode_values",
    "encode_binary",
    "extract_archive",
    "filter_charts",
    "select_version",
    "template_path",
]
