"""
Summary Service - Caller-side policy around OklinkClient.

The client primitives never retry beyond the locale fallback. Batch
callers (CLI, HTTP API) go through this service instead, which adds:

- In-flight de-duplication per address
- A serial queue with a random pause after each success
- A soft timeout per attempt
- Bounded retries on transient failures only
- Never raises adapter errors - returns None on failure
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Iterable, Optional

from explorer_adapters.addresses import middle_ellipsis
from explorer_adapters.client import OklinkClient
from explorer_adapters.config import ExplorerConfig
from explorer_adapters.exceptions import ExplorerAdapterError, FetchFailure, TransportError
from explorer_adapters.models import AddressSummary


logger = logging.getLogger(__name__)


def is_transient(error: BaseException) -> bool:
    """Timeouts, network errors, 429 and 5xx are worth retrying."""
    if isinstance(error, asyncio.TimeoutError):
        return True
    if isinstance(error, TransportError):
        return True
    if isinstance(error, FetchFailure):
        return error.is_transient
    return False


class SummaryService:
    """
    Queued, de-duplicated access to address summaries.

    Usage:
        service = SummaryService(client)
        summary = await service.get_summary("T...")   # None on failure
    """

    BACKOFF_STEP = 0.6
    BACKOFF_JITTER = 0.3

    def __init__(
        self,
        client: OklinkClient,
        max_attempts: int = 2,
        soft_timeout: float = 9.0,
        min_interval: float = 1.0,
        max_interval: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._client = client
        self._max_attempts = max(1, max_attempts)
        self._soft_timeout = soft_timeout
        self._min_interval = min_interval
        self._max_interval = max_interval
        self._sleep = sleep
        self._rng = rng or random.Random()

        self._queue_lock = asyncio.Lock()
        self._inflight: dict[tuple[str, Optional[str]], asyncio.Future] = {}
        self._cancelled = False

    @classmethod
    def from_config(cls, client: OklinkClient, config: ExplorerConfig) -> "SummaryService":
        """Create with the caller-side policy values from config."""
        return cls(
            client,
            max_attempts=config.max_attempts,
            soft_timeout=config.soft_timeout_seconds,
            min_interval=config.min_interval_seconds,
            max_interval=config.max_interval_seconds,
        )

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop starting new attempts."""
        self._cancelled = True

    def reset(self) -> None:
        """Allow attempts again after cancel()."""
        self._cancelled = False

    async def get_summary(
        self,
        address: str,
        locale: Optional[str] = None,
    ) -> Optional[AddressSummary]:
        """Summary for one address, or None if it could not be fetched."""
        if not address:
            return None

        key = (address, locale)
        existing = self._inflight.get(key)
        if existing is not None:
            return await asyncio.shield(existing)

        task = asyncio.ensure_future(self._run(address, locale))
        self._inflight[key] = task
        task.add_done_callback(lambda done: self._discard(key, done))
        return await asyncio.shield(task)

    async def summarize_many(
        self,
        addresses: Iterable[str],
        locale: Optional[str] = None,
    ) -> dict[str, Optional[AddressSummary]]:
        """Summaries keyed by address, duplicates collapsed, order kept."""
        unique = list(dict.fromkeys(a for a in addresses if a))
        results = await asyncio.gather(*(self.get_summary(a, locale) for a in unique))
        return dict(zip(unique, results))

    def _discard(self, key: tuple[str, Optional[str]], task: asyncio.Future) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _run(self, address: str, locale: Optional[str]) -> Optional[AddressSummary]:
        last_error: Optional[BaseException] = None

        for attempt in range(1, self._max_attempts + 1):
            if self._cancelled:
                break
            try:
                return await self._attempt(address, locale)
            except (ExplorerAdapterError, ValueError, asyncio.TimeoutError) as e:
                last_error = e
                if attempt < self._max_attempts and is_transient(e):
                    delay = self.BACKOFF_STEP * attempt + self._rng.uniform(0, self.BACKOFF_JITTER)
                    logger.info(
                        f"[oklink] Retry {attempt}/{self._max_attempts - 1} for "
                        f"{middle_ellipsis(address)} in {delay:.2f}s: {e!r}"
                    )
                    await self._sleep(delay)
                    continue
                break

        if last_error is None:
            logger.info(f"[oklink] Summary skipped for {middle_ellipsis(address)}: cancelled")
            return None
        logger.warning(f"[oklink] Summary failed for {middle_ellipsis(address)}: {last_error}")
        return None

    async def _attempt(self, address: str, locale: Optional[str]) -> AddressSummary:
        async with self._queue_lock:
            summary = await asyncio.wait_for(
                self._client.fetch_slim_summary(address, locale),
                timeout=self._soft_timeout,
            )
            await self._sleep(self._rng.uniform(self._min_interval, self._max_interval))
            return summary
