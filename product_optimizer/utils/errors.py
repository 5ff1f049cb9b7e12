"""
Application error hierarchy and centralized error handling.

Stage failures fall into two groups: those a stage recovers from locally by
falling back to static data (missing credentials, unavailable upstream), and
those that fail the whole request (bad identifier, empty competitor set).
"""

import asyncio
from enum import Enum
from typing import Any, Optional

import httpx


class ErrorType(str, Enum):
    """Error type classification."""
    INVALID_IDENTIFIER = "invalid_identifier"
    MISSING_IDENTIFIER = "missing_identifier"
    UNSUPPORTED_MARKETPLACE = "unsupported_marketplace"
    MISSING_CREDENTIALS = "missing_credentials"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    EMPTY_COMPETITOR_SET = "empty_competitor_set"
    LLM_ERROR = "llm_error"
    TIMEOUT_ERROR = "timeout_error"
    INTERNAL_ERROR = "internal_error"


# =============================================================================
# Custom Exceptions
# =============================================================================

class AppError(Exception):
    """Base application exception."""

    error_type: ErrorType = ErrorType.INTERNAL_ERROR
    recoverable: bool = False

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidIdentifierError(AppError):
    """Identifier is missing or does not look like an ASIN."""
    error_type = ErrorType.INVALID_IDENTIFIER


class MissingIdentifierError(InvalidIdentifierError):
    error_type = ErrorType.MISSING_IDENTIFIER


class UnsupportedMarketplaceError(AppError):
    error_type = ErrorType.UNSUPPORTED_MARKETPLACE


class MissingCredentialsError(AppError):
    """A live call cannot be attempted because credentials are not configured."""
    error_type = ErrorType.MISSING_CREDENTIALS
    recoverable = True


class UpstreamUnavailableError(AppError):
    """A live call failed, timed out or returned a non-success status."""
    error_type = ErrorType.UPSTREAM_UNAVAILABLE
    recoverable = True

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class EmptyCompetitorSetError(AppError):
    """Aggregation was asked to summarize zero competitors."""
    error_type = ErrorType.EMPTY_COMPETITOR_SET


class LLMServiceError(UpstreamUnavailableError):
    """Claude call failed or returned nothing usable."""
    error_type = ErrorType.LLM_ERROR


# =============================================================================
# Error Handler
# =============================================================================

# Public messages; upstream detail never reaches the caller
PUBLIC_MESSAGES: dict[ErrorType, str] = {
    ErrorType.MISSING_IDENTIFIER: "Identifier is required.",
    ErrorType.INVALID_IDENTIFIER: "Invalid identifier format.",
    ErrorType.UNSUPPORTED_MARKETPLACE: "Unsupported marketplace.",
}

GENERIC_FAILURE_MESSAGE = "Failed to process benchmarking request."


class ErrorHandler:
    """Centralized error handling and categorization."""

    @staticmethod
    def categorize_error(error: Exception) -> ErrorType:
        """Categorize errors for appropriate handling."""
        if isinstance(error, AppError):
            return error.error_type
        if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError)):
            return ErrorType.TIMEOUT_ERROR
        if isinstance(error, (httpx.TransportError, ConnectionError)):
            return ErrorType.UPSTREAM_UNAVAILABLE
        return ErrorType.INTERNAL_ERROR

    @staticmethod
    def status_code_for(error_type: ErrorType) -> int:
        """HTTP status for an error that reaches the request boundary."""
        if error_type in PUBLIC_MESSAGES:
            return 400
        return 500

    @staticmethod
    def public_message(error_type: ErrorType) -> str:
        return PUBLIC_MESSAGES.get(error_type, GENERIC_FAILURE_MESSAGE)

    @classmethod
    def is_recoverable(cls, error: Exception) -> bool:
        """Whether a stage should fall back instead of propagating."""
        if isinstance(error, AppError):
            return error.recoverable
        return cls.categorize_error(error) in (
            ErrorType.TIMEOUT_ERROR,
            ErrorType.UPSTREAM_UNAVAILABLE,
        )
