"""
Explorer Adapters Package - OKLink address summary scraping.

Fetches server-rendered OKLink TRON address pages, extracts the
embedded appState JSON and projects it into a flat AddressSummary.

Features:
- Cache-busted fetches through a configurable base URL (proxy)
- Locale path fallback (zh-hans first, canonical path second)
- Distinct errors for transport, HTTP status and page-shape failures
- Partial-field tolerance - missing data is None, never an error

Quick Start:
    from explorer_adapters import OklinkClient, ExplorerConfig

    async def lookup(address):
        async with OklinkClient(ExplorerConfig.from_env()) as client:
            summary = await client.fetch_slim_summary(address)
            print(summary.total_usd_value, summary.risk_tags)

Batch callers should prefer SummaryService, which queues requests,
de-duplicates in-flight addresses and retries transient failures:

    service = SummaryService(client)
    results = await service.summarize_many(addresses)   # None on failure
"""

from explorer_adapters.addresses import is_valid_tron_address, middle_ellipsis
from explorer_adapters.client import OklinkClient, fetch_slim_summary
from explorer_adapters.config import ExplorerConfig
from explorer_adapters.exceptions import (
    ConfigurationError,
    ExplorerAdapterError,
    FetchFailure,
    InvalidAddressError,
    StateNotFoundError,
    StateParseError,
    TransportError,
)
from explorer_adapters.extractor import extract_app_state
from explorer_adapters.fetcher import HtmlFetcher
from explorer_adapters.models import (
    AddressSummary,
    EntityTag,
    PageKind,
    ResolutionAttempt,
    ResolutionState,
    SummaryRequest,
)
from explorer_adapters.projector import (
    dig,
    normalize_contract_flag,
    normalize_entity_tags,
    normalize_tag_list,
    project_summary,
)
from explorer_adapters.resolver import LocaleFallbackResolver, build_page_path
from explorer_adapters.service import SummaryService


__version__ = "1.0.0"

__all__ = [
    # Client
    "OklinkClient",
    "fetch_slim_summary",
    "SummaryService",
    "ExplorerConfig",

    # Pipeline
    "HtmlFetcher",
    "extract_app_state",
    "LocaleFallbackResolver",
    "build_page_path",
    "project_summary",
    "dig",
    "normalize_tag_list",
    "normalize_entity_tags",
    "normalize_contract_flag",

    # Models
    "AddressSummary",
    "EntityTag",
    "PageKind",
    "ResolutionAttempt",
    "ResolutionState",
    "SummaryRequest",

    # Exceptions
    "ExplorerAdapterError",
    "TransportError",
    "FetchFailure",
    "StateNotFoundError",
    "StateParseError",
    "ConfigurationError",
    "InvalidAddressError",

    # Addresses
    "is_valid_tron_address",
    "middle_ellipsis",
]
