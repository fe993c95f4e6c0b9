"""
Explorer Adapter Exceptions - Custom exception hierarchy.

Each failure mode of a page load has its own type so callers can tell
"network failed" from "upstream said no" from "page shape changed".
"""

from datetime import datetime
from typing import Any, Optional


class ExplorerAdapterError(Exception):
    """Base exception for all explorer adapter errors."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.adapter_name = adapter_name
        self.original_error = original_error
        self.context = context or {}
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "adapter_name": self.adapter_name,
            "original_error": str(self.original_error) if self.original_error else None,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.adapter_name:
            parts.append(f"[adapter={self.adapter_name}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)


class TransportError(ExplorerAdapterError):
    """Network-level failure reaching the explorer or the forwarding proxy."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, original_error, context)
        self.request_url = request_url

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["request_url"] = self.request_url
        return data


class FetchFailure(ExplorerAdapterError):
    """Explorer answered with a non-success HTTP status."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, original_error, context)
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url

    @property
    def is_transient(self) -> bool:
        """Rate limiting and server-side errors are worth another try."""
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "response_body": self.response_body,
            "request_url": self.request_url,
        })
        return data


class StateNotFoundError(ExplorerAdapterError):
    """The appState script element is missing or empty."""


class StateParseError(ExplorerAdapterError):
    """The appState script element exists but does not hold valid JSON."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        snippet: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, original_error, context)
        self.snippet = snippet

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["snippet"] = self.snippet
        return data


class ConfigurationError(ExplorerAdapterError):
    """Configuration error for the explorer client."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        config_key: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, original_error, context)
        self.config_key = config_key

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["config_key"] = self.config_key
        return data


class InvalidAddressError(ExplorerAdapterError):
    """Address failed TRON Base58Check validation."""

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        adapter_name: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, None, context)
        self.address = address

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["address"] = self.address
        return data
