"""
Explorer Adapters - Configuration.

============================================================
PURPOSE
============================================================
All configuration for the OKLink summary client.

The base URL decides where traffic goes: a local development
proxy or a deployed forwarding service. The explorer does not
allow direct cross-origin access, so the deployer controls it.

Loaded ONCE at startup and injected, never read inside
request logic.

============================================================
"""

import os
from dataclasses import dataclass
from typing import Dict, Optional

from dotenv import load_dotenv

from explorer_adapters.exceptions import ConfigurationError


DEFAULT_BASE_URL = "https://www.oklink.com"
DEFAULT_LOCALE = "zh-hans"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


# ============================================================
# EXPLORER CONFIGURATION
# ============================================================

@dataclass
class ExplorerConfig:
    """
    Configuration for fetching explorer pages.
    """

    base_url: str = DEFAULT_BASE_URL
    """Prefix every page path is appended to (proxy or explorer origin)."""

    preferred_locale: str = DEFAULT_LOCALE
    """Locale segment tried first; empty string means canonical path only."""

    timeout_seconds: float = 15.0
    """Total timeout per page fetch."""

    user_agent: str = DEFAULT_USER_AGENT
    """Browser-identifying User-Agent header."""

    accept_language: str = "zh-CN,zh;q=0.9,en;q=0.8"
    """Accept-Language header."""

    referer: Optional[str] = DEFAULT_BASE_URL
    """Referer header matching the explorer's own site."""

    origin: Optional[str] = DEFAULT_BASE_URL
    """Origin header matching the explorer's own site."""

    # Caller-side policy (SummaryService)

    max_attempts: int = 2
    """Attempts per address on transient failures."""

    soft_timeout_seconds: float = 9.0
    """Soft timeout per summary attempt."""

    min_interval_seconds: float = 1.0
    """Minimum pause between queued summaries."""

    max_interval_seconds: float = 2.0
    """Maximum pause between queued summaries."""

    def validate(self) -> None:
        """Validate configuration values."""
        if not self.base_url:
            raise ConfigurationError("base_url must not be empty", config_key="base_url")
        if self.timeout_seconds <= 0:
            raise ConfigurationError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}",
                config_key="timeout_seconds",
            )
        if self.max_attempts < 1:
            raise ConfigurationError(
                f"max_attempts must be at least 1, got {self.max_attempts}",
                config_key="max_attempts",
            )
        if self.min_interval_seconds < 0 or self.max_interval_seconds < self.min_interval_seconds:
            raise ConfigurationError(
                "interval bounds must satisfy 0 <= min <= max",
                config_key="min_interval_seconds",
            )

    def headers(self) -> Dict[str, str]:
        """Default request headers."""
        headers = {
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": self.accept_language,
            "User-Agent": self.user_agent,
            "Cache-Control": "no-cache, no-store",
            "Pragma": "no-cache",
        }
        if self.referer:
            headers["Referer"] = self.referer
        if self.origin:
            headers["Origin"] = self.origin
        return headers

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "ExplorerConfig":
        """
        Build configuration from OKLINK_* environment variables.

        A .env file in the working directory is loaded first.
        """
        if load_env_file:
            load_dotenv()

        defaults = cls()
        try:
            timeout = float(os.getenv("OKLINK_TIMEOUT_SECONDS", defaults.timeout_seconds))
        except ValueError as e:
            raise ConfigurationError(
                "OKLINK_TIMEOUT_SECONDS must be a number",
                config_key="OKLINK_TIMEOUT_SECONDS",
                original_error=e,
            )

        config = cls(
            base_url=os.getenv("OKLINK_BASE_URL", defaults.base_url),
            preferred_locale=os.getenv("OKLINK_LOCALE", defaults.preferred_locale),
            timeout_seconds=timeout,
            user_agent=os.getenv("OKLINK_USER_AGENT", defaults.user_agent),
            accept_language=os.getenv("OKLINK_ACCEPT_LANGUAGE", defaults.accept_language),
            referer=os.getenv("OKLINK_REFERER", defaults.referer) or None,
            origin=os.getenv("OKLINK_ORIGIN", defaults.origin) or None,
        )
        config.validate()
        return config
