"""
Live check for the OKLink summary scraper.

Demonstrates:
- Fetching a slim summary through the configured base URL
- Locale fallback (resolution history)
- Canonical-only lookup with an empty locale

Hits the network. Configure with OKLINK_* variables (see .env).
"""

import asyncio
import logging
import sys
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from explorer_adapters import (
    AddressSummary,
    ExplorerConfig,
    OklinkClient,
)
from explorer_adapters.addresses import middle_ellipsis


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


DEFAULT_ADDRESS = "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t"


def print_banner(text: str) -> None:
    """Print a banner."""
    print("\n" + "=" * 60)
    print(f"  {text}")
    print("=" * 60)


def print_summary(summary: AddressSummary) -> None:
    print(f"  Address: {middle_ellipsis(summary.address or '')}")
    print(f"  Total USD: {summary.total_usd_value}")
    print(f"  USDT holding: {summary.usdt_holding}")
    print(f"  Contract: {summary.is_contract}")
    print(f"  Entity tags: {[tag.text for tag in summary.entity_tags]}")
    print(f"  Risk tags: {summary.risk_tags}")
    print(f"  Property tags: {summary.property_tags}")
    print(f"  Last TX: {summary.last_tx_hash} @ {summary.last_tx_timestamp}")


async def check_preferred_locale(config: ExplorerConfig, address: str) -> None:
    """Fetch with the configured locale and show how each page resolved."""
    print_banner(f"CHECK: Preferred locale ({config.preferred_locale or 'none'})")

    async with OklinkClient(config) as client:
        summary = await client.fetch_slim_summary(address)
        print_summary(summary)

        print("\nResolution history:")
        for attempt in client.resolver.history:
            error = f" ({attempt.error})" if attempt.error else ""
            print(f"  {attempt.page.name:<15} {attempt.state.value:<14} {attempt.path}{error}")


async def check_canonical_only(config: ExplorerConfig, address: str) -> None:
    """Fetch the canonical (no locale) paths only."""
    print_banner("CHECK: Canonical path only")

    async with OklinkClient(config) as client:
        summary = await client.fetch_slim_summary(address, locale="")
        print_summary(summary)


async def main():
    """Run all checks."""
    address = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_ADDRESS
    config = ExplorerConfig.from_env(load_env_file=False)

    print("\n" + "=" * 60)
    print("  OKLINK ADDRESS SUMMARY - LIVE CHECK")
    print(f"  Base URL: {config.base_url}")
    print("=" * 60)

    try:
        await check_preferred_locale(config, address)
        await check_canonical_only(config, address)

        print_banner("ALL CHECKS COMPLETED")
        print()

    except Exception as e:
        logger.error(f"Check failed: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    asyncio.run(main())
