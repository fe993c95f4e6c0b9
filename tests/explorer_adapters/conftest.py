"""
Shared fixtures for explorer adapter tests.
"""

from typing import Any

import pytest

from _oklink_helpers import USDT_CONTRACT, wrap_page_state


@pytest.fixture
def main_state() -> dict[str, Any]:
    """Fully populated profile page state."""
    return wrap_page_state({
        "infoStore": {
            "state": {
                "address": USDT_CONTRACT,
                "totalUsdValue": 1234.5,
                "balance": 88.25,
                "addressDetaiInfo": {
                    "firstEntryFromAddress": "TKzxdSv2FZKQrEqkKVgp5DcwEXBEKMg2Ax",
                    "firstEntryTimestamp": 1600000000000,
                    "firstEntryAmount": 100.0,
                    "firstEntryTxHash": "a1" * 32,
                    "totalTxAmount": 42,
                    "firstTxTimestamp": 1600000000000,
                    "firstTxHash": "b2" * 32,
                    "lastTxTimestamp": 1700000000000,
                    "lastTxHash": "c3" * 32,
                },
            },
        },
        "tagStore": {
            "tagMaps": {"entityTag": "Tether", "isContract": True},
            "entityTags": [{"text": "Tether", "type": "issuer"}],
            "riskTags": ["Phishing", {"text": "Scam"}],
            "propertyTags": [{"name": "Stablecoin"}, {"label": "TRC20"}],
        },
    })


@pytest.fixture
def token_state() -> dict[str, Any]:
    """Token-transfer page state."""
    return wrap_page_state({"infoStore": {"state": {"usdtHolding": 10.0}}})
