"""Utils module for the Product Optimizer."""

from product_optimizer.utils.logger import get_logger, setup_logging, LogContext
from product_optimizer.utils.errors import (
    AppError,
    EmptyCompetitorSetError,
    ErrorHandler,
    ErrorType,
    InvalidIdentifierError,
    LLMServiceError,
    MissingCredentialsError,
    MissingIdentifierError,
    UnsupportedMarketplaceError,
    UpstreamUnavailableError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
    "AppError",
    "EmptyCompetitorSetError",
    "ErrorHandler",
    "ErrorType",
    "InvalidIdentifierError",
    "LLMServiceError",
    "MissingCredentialsError",
    "MissingIdentifierError",
    "UnsupportedMarketplaceError",
    "UpstreamUnavailableError",
]
