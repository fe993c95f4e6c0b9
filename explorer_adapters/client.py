"""
OKLink Client - Entry point for address summaries.

Loads the profile and token-transfer pages concurrently, each through
the locale fallback, and projects both into one AddressSummary.
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from explorer_adapters.config import ExplorerConfig
from explorer_adapters.fetcher import HtmlFetcher
from explorer_adapters.models import AddressSummary, SummaryRequest
from explorer_adapters.projector import project_summary
from explorer_adapters.resolver import LocaleFallbackResolver


logger = logging.getLogger(__name__)


class OklinkClient:
    """
    Scraping client for OKLink TRON address pages.

    Usage:
        async with OklinkClient(ExplorerConfig.from_env()) as client:
            summary = await client.fetch_slim_summary("T...")
    """

    def __init__(
        self,
        config: Optional[ExplorerConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        fetcher: Optional[HtmlFetcher] = None,
        resolver: Optional[LocaleFallbackResolver] = None,
    ) -> None:
        self._config = config or ExplorerConfig()
        self._fetcher = fetcher or HtmlFetcher(self._config, session=session)
        self._resolver = resolver or LocaleFallbackResolver(self._fetcher)

    @property
    def config(self) -> ExplorerConfig:
        return self._config

    @property
    def resolver(self) -> LocaleFallbackResolver:
        return self._resolver

    async def fetch_slim_summary(
        self,
        address: str,
        locale: Optional[str] = None,
    ) -> AddressSummary:
        """
        Fetch and normalize the summary for one address.

        Args:
            address: TRON address
            locale: Preferred locale segment; None uses the configured
                one, "" goes straight to the canonical path

        Raises:
            ExplorerAdapterError: Either page failed after its fallback
            ValueError: Malformed address or locale
        """
        if locale is None:
            locale = self._config.preferred_locale
        request = SummaryRequest(address=address.strip() if address else address, locale=locale)
        request.validate()

        main_state, token_state = await self._gather_states(request)
        summary = project_summary(main_state, token_state)

        logger.info(
            f"[oklink] Summary for {request.address}: "
            f"usd={summary.total_usd_value} contract={summary.is_contract} "
            f"risk_tags={len(summary.risk_tags)}"
        )
        return summary

    async def _gather_states(self, request: SummaryRequest) -> tuple[Any, Any]:
        """Resolve both pages concurrently; a failure cancels the other."""
        tasks = [
            asyncio.ensure_future(
                self._resolver.resolve_main_state(request.address, request.locale)
            ),
            asyncio.ensure_future(
                self._resolver.resolve_token_state(request.address, request.locale)
            ),
        ]
        try:
            main_state, token_state = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return main_state, token_state

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close resources."""
        await self._fetcher.close()

    async def __aenter__(self) -> "OklinkClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(base_url={self._fetcher.base_url})>"


async def fetch_slim_summary(
    address: str,
    locale: str = "zh-hans",
    *,
    config: Optional[ExplorerConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> AddressSummary:
    """One-shot convenience wrapper around OklinkClient."""
    async with OklinkClient(config=config, session=session) as client:
        return await client.fetch_slim_summary(address, locale)
