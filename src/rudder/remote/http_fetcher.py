from __future__ import annotations

import logging

import requests

from rudder.config import DEFAULT_USER_AGENT
from rudder.errors import FetchError

logger = logging.getLogger(__name__)


class HttpFetcher:
    """Blocking GET of raw bytes with a bounded timeout."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds
        # requests.Session ships its own python-requests agent
        self.session.headers["User-Agent"] = user_agent

    def fetch_bytes(self, url: str) -> bytes:
        logger.debug("http get url=%s timeout_seconds=%s", url, self.timeout_seconds)
        try:
            response = self.session.get(url, timeout=self.timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(url, reason=str(exc)) from exc
        return response.content
