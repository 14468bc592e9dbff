"""
HTTP retrieval of pages, with retries on transport errors and redirect following.

The fetcher sits outside the extraction engine: it turns a URL into a
``FetchResult`` and never raises for network or HTTP failures. A failure is
captured on the result so the page façade can report it.
"""

from __future__ import annotations

import time
from typing import Dict, Optional

import httpx
import structlog

from .config import FetchConfig
from .exceptions import FetchError
from .models import FetchResult
from .observability import increment, observe

logger = structlog.get_logger(__name__)

_RETRYABLE = (httpx.TimeoutException, httpx.NetworkError)


class Fetcher:
    """
    Synchronous page fetcher built on ``httpx``.

    Args:
        config: Timeout, retry, redirect and header settings
        client: Optional pre-built ``httpx.Client``. When omitted the fetcher
                creates one on first use and closes it in ``close()``.
    """

    def __init__(self, config: Optional[FetchConfig] = None, client: Optional[httpx.Client] = None) -> None:
        self.config = config or FetchConfig()
        self._client = client
        self._owns_client = client is None

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"User-Agent": self.config.user_agent}
        headers.update(self.config.headers)
        return headers

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.config.timeout),
                follow_redirects=self.config.follow_redirects,
                max_redirects=self.config.max_redirects,
            )
        return self._client

    def fetch(self, url: str) -> FetchResult:
        """
        Fetch ``url``.

        Timeouts and connection failures are retried up to ``config.retries``
        times. HTTP error statuses are not retried; they are reported as a
        ``FetchError`` carrying the status code.
        """
        start = time.perf_counter()
        attempts = 0
        while True:
            attempts += 1
            try:
                response = self.client.get(
                    url,
                    headers=self.headers,
                    timeout=self.config.timeout,
                    follow_redirects=self.config.follow_redirects,
                )
                break
            except _RETRYABLE as e:
                if attempts > self.config.retries:
                    logger.warning("Fetch failed after retries", url=url, attempts=attempts, error=str(e))
                    return self._failure(url, FetchError(f"{type(e).__name__}: {e}", 500), start)
                increment("fetch_retries")
                logger.info("Retrying fetch", url=url, attempt=attempts, error=str(e))
            except httpx.HTTPError as e:
                logger.warning("Fetch failed", url=url, error=str(e))
                return self._failure(url, FetchError(f"{type(e).__name__}: {e}", 500), start)

        elapsed = time.perf_counter() - start
        observe("fetch_duration_seconds", elapsed)

        error: Optional[Exception] = None
        if response.is_error:
            error = FetchError(f"HTTP {response.status_code} for {response.url}", response.status_code)
            logger.warning("Fetch returned error status", url=url, status=response.status_code)

        return FetchResult(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            headers={key.lower(): value for key, value in response.headers.items()},
            content=response.content,
            # Only a charset declared by the server; otherwise the parser sniffs the markup.
            encoding=response.charset_encoding,
            elapsed=elapsed,
            error=error,
        )

    def _failure(self, url: str, error: FetchError, start: float) -> FetchResult:
        elapsed = time.perf_counter() - start
        observe("fetch_duration_seconds", elapsed)
        return FetchResult(
            url=url,
            final_url=url,
            status_code=error.status_code or 500,
            elapsed=elapsed,
            error=error,
        )

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
