"""
Path Resolver - Locale fallback for explorer pages.

Explorer pages exist under a localized path and a canonical one.
The localized path is occasionally unavailable (rate limited,
regionally redirected, not localized), so a failed attempt on it
is retried once on the canonical path.

State machine:

    TRY_PREFERRED --ok--> SUCCEEDED
    TRY_PREFERRED --error--> TRY_FALLBACK
    TRY_FALLBACK --ok--> SUCCEEDED
    TRY_FALLBACK --error--> FAILED (fallback error propagates)

Attempts are strictly sequential.
"""

import logging
from typing import Any, Callable, Optional

from explorer_adapters.extractor import extract_app_state
from explorer_adapters.fetcher import HtmlFetcher
from explorer_adapters.models import PageKind, ResolutionAttempt, ResolutionState


logger = logging.getLogger(__name__)


def build_page_path(address: str, page: PageKind, locale: Optional[str] = None) -> str:
    """Build /{locale?}/tron/address/{address}[/{segment}]."""
    path = f"/tron/address/{address}"
    if page.value:
        path = f"{path}/{page.value}"
    if locale:
        path = f"/{locale.strip('/')}{path}"
    return path


class LocaleFallbackResolver:
    """
    Resolves the appState of an explorer page, preferred locale first.

    Usage:
        resolver = LocaleFallbackResolver(fetcher)
        state = await resolver.resolve_main_state("T...", "zh-hans")
    """

    MAX_HISTORY = 100

    def __init__(
        self,
        fetcher: HtmlFetcher,
        extractor: Callable[[str], Any] = extract_app_state,
    ) -> None:
        self._fetcher = fetcher
        self._extract = extractor
        self._history: list[ResolutionAttempt] = []

    @property
    def history(self) -> list[ResolutionAttempt]:
        """Recent attempts, oldest first."""
        return list(self._history)

    async def resolve_main_state(self, address: str, preferred_locale: Optional[str] = None) -> Any:
        """Resolve the profile page state."""
        return await self.resolve_page_state(address, PageKind.PROFILE, preferred_locale)

    async def resolve_token_state(self, address: str, preferred_locale: Optional[str] = None) -> Any:
        """Resolve the token-transfer page state."""
        return await self.resolve_page_state(address, PageKind.TOKEN_TRANSFER, preferred_locale)

    async def resolve_page_state(
        self,
        address: str,
        page: PageKind,
        preferred_locale: Optional[str] = None,
    ) -> Any:
        """
        Run the two-attempt fallback for one page.

        Any failure of the preferred attempt triggers the fallback.
        Cancellation is not a failure and propagates immediately.

        Raises:
            ExplorerAdapterError: The fallback attempt failed (its error,
                not the preferred attempt's, propagates unmodified)
        """
        state = ResolutionState.TRY_PREFERRED if preferred_locale else ResolutionState.TRY_FALLBACK

        while True:
            locale = preferred_locale if state == ResolutionState.TRY_PREFERRED else None
            path = build_page_path(address, page, locale)

            try:
                result = await self._load(path)
            except Exception as e:
                self._record(state, page, path, str(e))
                if state == ResolutionState.TRY_PREFERRED:
                    logger.warning(
                        f"[oklink] {page.name.lower()} page failed on {path}, "
                        f"falling back to canonical path: {e}"
                    )
                    state = ResolutionState.TRY_FALLBACK
                    continue
                self._record(ResolutionState.FAILED, page, path, str(e))
                raise

            self._record(state, page, path)
            self._record(ResolutionState.SUCCEEDED, page, path)
            logger.debug(f"[oklink] {page.name.lower()} page resolved via {path}")
            return result

    async def _load(self, path: str) -> Any:
        html = await self._fetcher.fetch(path)
        return self._extract(html)

    def _record(
        self,
        state: ResolutionState,
        page: PageKind,
        path: str,
        error: Optional[str] = None,
    ) -> None:
        self._history.append(ResolutionAttempt(state=state, page=page, path=path, error=error))
        if len(self._history) > self.MAX_HISTORY:
            self._history = self._history[-self.MAX_HISTORY:]
