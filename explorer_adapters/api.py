"""
Address Summary API Endpoints.

============================================================
PURPOSE
============================================================
HTTP API exposing address summaries to UI and export
collaborators.

PRINCIPLES:
- ALL endpoints are READ-ONLY
- Upstream failures surface as 502, never as empty data
- Missing fields in a successful summary are null

============================================================
"""

import json
import logging
from datetime import datetime
from typing import Any

from aiohttp import web

from explorer_adapters.addresses import is_valid_tron_address
from explorer_adapters.client import OklinkClient
from explorer_adapters.exceptions import ExplorerAdapterError, InvalidAddressError


logger = logging.getLogger(__name__)


def json_response(data: Any, status: int = 200) -> web.Response:
    """Create JSON response."""
    return web.Response(
        text=json.dumps(data, indent=2, default=str),
        status=status,
        content_type="application/json",
    )


# ============================================================
# API HANDLERS
# ============================================================

class SummaryAPI:
    """
    HTTP API for address summaries.

    Each request goes straight to the client; queueing and retries
    are left to the caller of the API.
    """

    def __init__(self, client: OklinkClient, validate_addresses: bool = True):
        """Initialize API."""
        self._client = client
        self._validate_addresses = validate_addresses

    async def get_summary(self, request: web.Request) -> web.Response:
        """
        GET /api/oklink/addresses/{address}/summary?locale=zh-hans

        Get the normalized summary for one address.
        """
        address = request.match_info.get("address", "").strip()
        locale = request.query.get("locale")

        if self._validate_addresses and not is_valid_tron_address(address):
            error = InvalidAddressError(f"Invalid TRON address: {address}", address=address)
            return json_response({
                "status": "error",
                "error": error.to_dict(),
            }, status=400)

        try:
            summary = await self._client.fetch_slim_summary(address, locale)
        except ValueError as e:
            return json_response({
                "status": "error",
                "error": {"error_type": "ValueError", "message": str(e)},
            }, status=400)
        except ExplorerAdapterError as e:
            logger.error(f"Error getting summary for {address}: {e}")
            return json_response({
                "status": "error",
                "error": e.to_dict(),
            }, status=502)

        return json_response({
            "status": "ok",
            "data": summary.to_dict(),
        })

    async def health(self, request: web.Request) -> web.Response:
        """
        GET /api/oklink/health

        Service health check.
        """
        return json_response({
            "status": "ok",
            "timestamp": datetime.utcnow().isoformat(),
            "service": "oklink-summary",
        })


# ============================================================
# ROUTER FACTORY
# ============================================================

def create_summary_router(
    client: OklinkClient,
    validate_addresses: bool = True,
) -> web.Application:
    """
    Create summary API application.

    Returns an aiohttp Application with all routes configured.
    """
    api = SummaryAPI(client, validate_addresses=validate_addresses)

    app = web.Application()
    app.router.add_get("/health", api.health)
    app.router.add_get("/addresses/{address}/summary", api.get_summary)

    return app


def setup_summary_routes(
    app: web.Application,
    client: OklinkClient,
    prefix: str = "/api/oklink",
    validate_addresses: bool = True,
) -> None:
    """Add summary routes to an existing application."""
    summary_app = create_summary_router(client, validate_addresses=validate_addresses)
    app.add_subapp(prefix, summary_app)
