"""
HTML Fetcher - Cache-busted GET requests through a configurable base URL.

No retries and no rate limiting here. Retry policy belongs to the
caller (see LocaleFallbackResolver and SummaryService).
"""

import asyncio
import logging
import time
from typing import Optional

import aiohttp

from explorer_adapters.config import ExplorerConfig
from explorer_adapters.exceptions import FetchFailure, TransportError


logger = logging.getLogger(__name__)


CACHE_BUST_PARAM = "_ts"


class HtmlFetcher:
    """
    Fetches raw explorer HTML.

    The session may be injected (caller owns it) or created lazily
    (closed by close() / async with).
    """

    ADAPTER_NAME = "oklink"
    MAX_ERROR_BODY = 500

    def __init__(
        self,
        config: Optional[ExplorerConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._config = config or ExplorerConfig()
        self._config.validate()
        self._base_url = self._config.base_url.rstrip("/")
        self._timeout = timeout if timeout is not None else self._config.timeout_seconds
        self._session = session
        self._owns_session = session is None
        self._last_stamp = 0

    @property
    def base_url(self) -> str:
        return self._base_url

    def _next_stamp(self) -> int:
        """Millisecond timestamp, strictly increasing per fetcher."""
        stamp = int(time.time() * 1000)
        if stamp <= self._last_stamp:
            stamp = self._last_stamp + 1
        self._last_stamp = stamp
        return stamp

    def build_url(self, path: str) -> str:
        """Build the full cache-busted URL for a path suffix."""
        if f"{CACHE_BUST_PARAM}=" in path:
            raise ValueError(f"path already carries a {CACHE_BUST_PARAM} parameter: {path}")
        if not path.startswith("/"):
            path = "/" + path
        sep = "&" if "?" in path else "?"
        return f"{self._base_url}{path}{sep}{CACHE_BUST_PARAM}={self._next_stamp()}"

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
            self._owns_session = True
        return self._session

    async def fetch(self, path: str, timeout: Optional[float] = None) -> str:
        """
        Fetch a page and return its body text.

        Args:
            path: Path suffix, e.g. "/zh-hans/tron/address/T..."
            timeout: Override the fetcher's timeout for this call

        Raises:
            FetchFailure: Non-2xx response
            TransportError: Connection, DNS or timeout failure
        """
        url = self.build_url(path)
        session = await self._get_session()
        client_timeout = aiohttp.ClientTimeout(
            total=timeout if timeout is not None else self._timeout
        )

        start_time = time.time()
        try:
            async with session.get(
                url,
                headers=self._config.headers(),
                timeout=client_timeout,
            ) as response:
                latency_ms = (time.time() - start_time) * 1000

                if response.status < 200 or response.status >= 300:
                    body = await response.text(errors="replace")
                    logger.debug(
                        f"[{self.ADAPTER_NAME}] HTTP {response.status} for {url} "
                        f"({latency_ms:.0f}ms)"
                    )
                    raise FetchFailure(
                        message=f"OKLink fetch failed: {response.status}",
                        adapter_name=self.ADAPTER_NAME,
                        status_code=response.status,
                        response_body=body[:self.MAX_ERROR_BODY],
                        request_url=url,
                    )

                text = await response.text()
                logger.debug(
                    f"[{self.ADAPTER_NAME}] GET {url} -> {response.status} "
                    f"({len(text)} chars, {latency_ms:.0f}ms)"
                )
                return text

        except UnicodeDecodeError as e:
            raise TransportError(
                message=f"Undecodable response body: {e.reason}",
                adapter_name=self.ADAPTER_NAME,
                request_url=url,
                original_error=e,
            )
        except asyncio.TimeoutError as e:
            raise TransportError(
                message="Request timed out",
                adapter_name=self.ADAPTER_NAME,
                request_url=url,
                original_error=e,
            )
        except aiohttp.ClientError as e:
            raise TransportError(
                message=f"Connection error: {e}",
                adapter_name=self.ADAPTER_NAME,
                request_url=url,
                original_error=e,
            )

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "HtmlFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(base_url={self._base_url})>"
