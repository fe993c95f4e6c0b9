"""
Explorer Adapters - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line interface for OKLink address summaries.

- Provides argparse-based CLI
- Loads configuration from environment, overridden by flags
- Prints summaries as JSON keyed by address
- Optionally serves the read-only HTTP API

============================================================
USAGE
============================================================
python -m explorer_adapters.cli TXYZ...
python -m explorer_adapters.cli TXYZ... TABC... --locale ""
python -m explorer_adapters.cli --serve --port 8081

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Dict, List, Optional

from aiohttp import web

from explorer_adapters.addresses import is_valid_tron_address
from explorer_adapters.api import setup_summary_routes
from explorer_adapters.client import OklinkClient
from explorer_adapters.config import ExplorerConfig
from explorer_adapters.exceptions import ConfigurationError
from explorer_adapters.models import AddressSummary
from explorer_adapters.service import SummaryService


LOG_FORMAT = "%(asctime)s | %(levelname)-5s | %(name)s | %(message)s"


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="oklink-summary",
        description="Fetch normalized OKLink summaries for TRON addresses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  OKLINK_BASE_URL, OKLINK_LOCALE, OKLINK_TIMEOUT_SECONDS,
  OKLINK_USER_AGENT, OKLINK_ACCEPT_LANGUAGE, OKLINK_REFERER, OKLINK_ORIGIN
  (a .env file in the working directory is honoured)

Examples:
  %(prog)s TXYZ...                     # One address, zh-hans first
  %(prog)s TXYZ... --locale ""         # Canonical path only
  %(prog)s --serve --port 8081         # Serve /api/oklink
        """
    )

    parser.add_argument(
        "addresses",
        nargs="*",
        help="TRON addresses to summarize",
    )

    # --------------------------------------------------------
    # Upstream Options
    # --------------------------------------------------------
    upstream_group = parser.add_argument_group("Upstream Options")

    upstream_group.add_argument(
        "--locale", "-l",
        type=str,
        default=None,
        help="Preferred locale segment (default: OKLINK_LOCALE or zh-hans)",
    )

    upstream_group.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Base URL of the explorer or forwarding proxy",
    )

    upstream_group.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-fetch timeout in seconds",
    )

    upstream_group.add_argument(
        "--skip-validation",
        action="store_true",
        help="Do not reject addresses failing Base58Check",
    )

    # --------------------------------------------------------
    # Server Options
    # --------------------------------------------------------
    server_group = parser.add_argument_group("Server Options")

    server_group.add_argument(
        "--serve",
        action="store_true",
        help="Serve the summary HTTP API instead of printing",
    )

    server_group.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Bind host (default: 127.0.0.1)",
    )

    server_group.add_argument(
        "--port",
        type=int,
        default=8081,
        help="Bind port (default: 8081)",
    )

    # --------------------------------------------------------
    # Output Options
    # --------------------------------------------------------
    output_group = parser.add_argument_group("Output Options")

    output_group.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2)",
    )

    output_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )

    return parser


# ============================================================
# CLI CONFIGURATION BUILDER
# ============================================================

def build_config(args: argparse.Namespace) -> ExplorerConfig:
    """
    Build explorer configuration from environment and CLI arguments.

    Flags win over environment values.
    """
    config = ExplorerConfig.from_env()
    if args.base_url:
        config.base_url = args.base_url
    if args.locale is not None:
        config.preferred_locale = args.locale
    if args.timeout is not None:
        config.timeout_seconds = args.timeout
    config.validate()
    return config


def split_addresses(addresses: List[str], skip_validation: bool = False) -> tuple[List[str], List[str]]:
    """Split addresses into (valid, invalid), order kept."""
    valid: List[str] = []
    invalid: List[str] = []
    for address in addresses:
        address = address.strip()
        if not address:
            continue
        if skip_validation or is_valid_tron_address(address):
            valid.append(address)
        else:
            invalid.append(address)
    return valid, invalid


# ============================================================
# RUNNERS
# ============================================================

async def summarize(
    addresses: List[str],
    config: ExplorerConfig,
) -> Dict[str, Optional[AddressSummary]]:
    """Summarize addresses through the queued service."""
    async with OklinkClient(config) as client:
        service = SummaryService.from_config(client, config)
        return await service.summarize_many(addresses, config.preferred_locale)


def serve(
    config: ExplorerConfig,
    host: str,
    port: int,
    validate_addresses: bool = True,
) -> None:
    """Run the HTTP API until interrupted."""
    client = OklinkClient(config)
    app = web.Application()
    setup_summary_routes(app, client, validate_addresses=validate_addresses)

    async def _close_client(_: web.Application) -> None:
        await client.close()

    app.on_cleanup.append(_close_client)
    web.run_app(app, host=host, port=port)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = build_config(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.serve:
        serve(config, args.host, args.port, validate_addresses=not args.skip_validation)
        return 0

    if not args.addresses:
        parser.print_usage(sys.stderr)
        print("Error: at least one address is required", file=sys.stderr)
        return 2

    valid, invalid = split_addresses(args.addresses, args.skip_validation)
    for address in invalid:
        print(f"Error: invalid TRON address: {address}", file=sys.stderr)
    if not valid:
        return 2

    results = asyncio.run(summarize(valid, config))

    print(json.dumps(
        {address: summary.to_dict() if summary else None for address, summary in results.items()},
        indent=args.indent,
        ensure_ascii=False,
    ))
    return 1 if any(summary is None for summary in results.values()) else 0


# ============================================================
# MODULE EXECUTION
# ============================================================

if __name__ == "__main__":
    sys.exit(main())
