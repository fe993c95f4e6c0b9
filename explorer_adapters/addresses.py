"""
TRON address helpers.

Base58Check: 21-byte payload (version 0x41 + 20-byte account id)
followed by the first 4 bytes of sha256(sha256(payload)).
"""

import hashlib
import re

import base58


TRON_ADDRESS_RE = re.compile(r"^T[1-9A-HJ-NP-Za-km-z]{33}$")
TRON_VERSION_BYTE = 0x41
CHECKSUM_LENGTH = 4


def is_valid_tron_address(address: str) -> bool:
    """Strict TRON address check: shape, version byte and checksum."""
    candidate = (address or "").strip()
    if not TRON_ADDRESS_RE.match(candidate):
        return False

    try:
        decoded = base58.b58decode(candidate)
    except ValueError:
        return False
    if len(decoded) < 25:
        return False

    payload = decoded[:-CHECKSUM_LENGTH]
    checksum = decoded[-CHECKSUM_LENGTH:]
    if payload[0] != TRON_VERSION_BYTE:
        return False

    expected = hashlib.sha256(hashlib.sha256(payload).digest()).digest()[:CHECKSUM_LENGTH]
    return checksum == expected


def middle_ellipsis(value: str, head: int = 6, tail: int = 4) -> str:
    """Shorten long identifiers for logs: TXYZab...wxyz."""
    if not value:
        return ""
    if len(value) <= head + tail + 3:
        return value
    return f"{value[:head]}...{value[-tail:]}"
