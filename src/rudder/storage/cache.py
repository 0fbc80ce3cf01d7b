from __future__ import annotations

import hashlib
import logging
import os
import threading
import time
import uuid
import weakref
from collections.abc import Callable
from pathlib import Path

from rudder.errors import FetchError

logger = logging.getLogger(__name__)

# fetch callables report remote failures as FetchError
FetchBytes = Callable[[str], bytes]
FETCH_ERRORS: tuple[type[Exception], ...] = (FetchError, OSError)


class ChartCache:
    """Read-through disk cache keyed by the MD5 of the source URL.

    A cached file is fresh while ``now - mtime < lifetime_seconds``. Misses
    and expired entries are refetched through ``fetch_bytes`` and written with
    a temp-file-then-rename so readers never observe a partial file. Fetch
    failures propagate; a stale file is never served in their place.
    """

    def __init__(
        self,
        directory: str | Path,
        *,
        lifetime_seconds: float,
        fetch_bytes: FetchBytes,
    ) -> None:
        if lifetime_seconds < 0:
            raise ValueError("lifetime_seconds must be >= 0")

        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.lifetime_seconds = lifetime_seconds
        self.fetch_bytes = fetch_bytes
        # entries disappear once no caller holds the lock for that key
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    def fetch(self, url: str) -> bytes:
        key = self.cache_key(url)
        data_path = self.directory / key

        with self._lock_for(key):
            if not data_path.exists():
                logger.info("chart_cache miss key=%s reason=not_found", key)
                self._refresh(url, data_path)
            elif not self.is_fresh(data_path):
                logger.info("chart_cache miss key=%s reason=expired", key)
                self._refresh(url, data_path)
            else:
                logger.info("chart_cache hit key=%s", key)

            return data_path.read_bytes()

    def path_for(self, url: str) -> Path:
        return self.directory / self.cache_key(url)

    def is_fresh(self, path: Path) -> bool:
        age = time.time() - path.stat().st_mtime
        return age < self.lifetime_seconds

    @staticmethod
    def cache_key(url: str) -> str:
        return hashlib.md5(url.encode("utf-8")).hexdigest()

    def _refresh(self, url: str, data_path: Path) -> None:
        logger.debug("chart_cache fetching url=%s", url)
        payload = self.fetch_bytes(url)

        tmp_path = data_path.with_name(f".{data_path.name}.{uuid.uuid4().hex}.tmp")
        try:
            tmp_path.write_bytes(payload)
            fetched_at = time.time()
            os.utime(tmp_path, (fetched_at, fetched_at))
            tmp_path.replace(data_path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.info("chart_cache set key=%s bytes=%d", data_path.name, len(payload))

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock
