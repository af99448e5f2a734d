"""
Error Classification

Errors raised while aggregating a portfolio. Each carries a category so the
HTTP layer can map it to a status code without inspecting messages.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Categories of portfolio lookup failures."""

    VALIDATION = "validation"         # Bad or missing caller input
    CONFIGURATION = "configuration"   # Missing credential or disabled provider
    PROVIDER = "provider"             # Upstream data provider failure


class PortfolioError(Exception):
    """Base class for errors surfaced to API callers."""

    category: ErrorCategory = ErrorCategory.VALIDATION
    status_code: int = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class InvalidInput(PortfolioError):
    """The wallet address is missing or malformed."""

    category = ErrorCategory.VALIDATION
    status_code = 400


class ConfigurationError(PortfolioError):
    """No credential is configured for the network, or its provider is disabled."""

    category = ErrorCategory.CONFIGURATION
    status_code = 400


class UpstreamFailure(PortfolioError):
    """
    A provider was unreachable or returned a malformed payload.

    Only raised where there is nothing to degrade to (the balance list
    itself). Metadata and price failures are absorbed per token.
    """

    category = ErrorCategory.PROVIDER
    status_code = 502

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.provider = provider


__all__ = [
    "ErrorCategory",
    "PortfolioError",
    "InvalidInput",
    "ConfigurationError",
    "UpstreamFailure",
]
