"""
Explorer Data Models - Flat address summary and resolver bookkeeping.

The summary is what UI and export collaborators consume. Every field is
independently optional: the two pages it is built from load independently.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class PageKind(Enum):
    """Explorer pages scraped for one address."""
    PROFILE = ""
    TOKEN_TRANSFER = "token-transfer"


class ResolutionState(Enum):
    """States of the two-attempt locale fallback."""
    TRY_PREFERRED = "try_preferred"
    TRY_FALLBACK = "try_fallback"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class EntityTag:
    """Entity tag as reported by the explorer tag store."""
    text: Optional[str] = None
    type: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "type": self.type}


@dataclass(frozen=True)
class AddressSummary:
    """
    Normalized per-address summary.

    None means "the explorer did not report it", never an error.
    """
    address: Optional[str] = None

    # Tagging
    entity_tag: Optional[str] = None
    entity_tags: list[EntityTag] = field(default_factory=list)
    risk_tags: list[str] = field(default_factory=list)
    property_tags: list[str] = field(default_factory=list)
    is_contract: Optional[bool] = None  # None = unknown

    # Valuation
    total_usd_value: Optional[float] = None
    balance_trx: Optional[float] = None
    usdt_holding: Optional[float] = None  # token-transfer page

    # First inbound transfer
    first_entry_from_address: Optional[str] = None
    first_entry_timestamp: Optional[int] = None
    first_entry_amount: Optional[float] = None
    first_entry_tx_hash: Optional[str] = None

    # Aggregate activity
    total_tx_amount: Optional[float] = None
    first_tx_timestamp: Optional[int] = None
    first_tx_hash: Optional[str] = None
    last_tx_timestamp: Optional[int] = None
    last_tx_hash: Optional[str] = None

    def has_activity(self) -> bool:
        """Check if the explorer reported any transaction activity."""
        return any(
            value is not None
            for value in (
                self.first_entry_tx_hash,
                self.total_tx_amount,
                self.first_tx_timestamp,
                self.first_tx_hash,
                self.last_tx_timestamp,
                self.last_tx_hash,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the flat row shape used for display and export."""
        return {
            "address": self.address,
            "entity_tag": self.entity_tag,
            "entity_tags": [tag.to_dict() for tag in self.entity_tags],
            "risk_tags": list(self.risk_tags),
            "property_tags": list(self.property_tags),
            "is_contract": self.is_contract,
            "total_usd_value": self.total_usd_value,
            "balance_trx": self.balance_trx,
            "usdt_holding": self.usdt_holding,
            "first_entry_from_address": self.first_entry_from_address,
            "first_entry_timestamp": self.first_entry_timestamp,
            "first_entry_amount": self.first_entry_amount,
            "first_entry_tx_hash": self.first_entry_tx_hash,
            "total_tx_amount": self.total_tx_amount,
            "first_tx_timestamp": self.first_tx_timestamp,
            "first_tx_hash": self.first_tx_hash,
            "last_tx_timestamp": self.last_tx_timestamp,
            "last_tx_hash": self.last_tx_hash,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AddressSummary":
        """Create from dictionary."""
        return cls(
            address=data.get("address"),
            entity_tag=data.get("entity_tag"),
            entity_tags=[
                EntityTag(text=tag.get("text"), type=tag.get("type"))
                for tag in data.get("entity_tags") or []
            ],
            risk_tags=list(data.get("risk_tags") or []),
            property_tags=list(data.get("property_tags") or []),
            is_contract=data.get("is_contract"),
            total_usd_value=data.get("total_usd_value"),
            balance_trx=data.get("balance_trx"),
            usdt_holding=data.get("usdt_holding"),
            first_entry_from_address=data.get("first_entry_from_address"),
            first_entry_timestamp=data.get("first_entry_timestamp"),
            first_entry_amount=data.get("first_entry_amount"),
            first_entry_tx_hash=data.get("first_entry_tx_hash"),
            total_tx_amount=data.get("total_tx_amount"),
            first_tx_timestamp=data.get("first_tx_timestamp"),
            first_tx_hash=data.get("first_tx_hash"),
            last_tx_timestamp=data.get("last_tx_timestamp"),
            last_tx_hash=data.get("last_tx_hash"),
        )


@dataclass
class ResolutionAttempt:
    """Record of one page load attempt made by the resolver."""
    state: ResolutionState
    page: PageKind
    path: str
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "state": self.state.value,
            "page": self.page.name.lower(),
            "path": self.path,
            "error": self.error,
        }


@dataclass
class SummaryRequest:
    """Request parameters for one address summary."""
    address: str
    locale: str = "zh-hans"

    def validate(self) -> None:
        """Validate request parameters."""
        if not self.address or not self.address.strip():
            raise ValueError("address must not be empty")
        if any(ch in self.address for ch in "/?#"):
            raise ValueError("address must not contain path or query characters")
        if self.locale and any(ch in self.locale for ch in "/?# \t\n"):
            raise ValueError(f"invalid locale: {self.locale!r}")
