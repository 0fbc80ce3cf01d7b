"""Remote chart repository access."""

from .http_fetcher import HttpFetcher
from .index import INDEX_FILE_NAME, IndexResolver, decode_index, index_url

__all__ = [
    "HttpFetcher",
    "INDEX_FILE_NAME",
    "IndexResolver",
    "decode_index",
    "index_url",
]
