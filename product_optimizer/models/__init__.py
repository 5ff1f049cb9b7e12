"""Data models module for the Product Optimizer."""

from product_optimizer.models.schemas import (
    # Base Models
    BaseModel,
    FrozenModel,

    # Enums
    DataSource,
    PipelineStage,

    # Product Models
    PriceHistory,
    ProductRecord,
    CompetitorRecord,

    # Aggregation Models
    PriceRange,
    MarketInsights,
    MarketSummary,

    # Request / Response Models
    BenchmarkRequest,
    StageOutcome,
    BenchmarkReport,
    ErrorResponse,

    # Validators
    IDENTIFIER_PATTERN,
    MAX_COMPETITORS,
    MAX_KEYWORDS,
    MAX_TOP_KEYWORDS,
    normalize_identifier,
    validate_identifier,
    validate_marketplace,
)
from product_optimizer.models.resolution import (
    Fallback,
    FallbackReason,
    Live,
    Resolution,
)

__all__ = [
    "BaseModel",
    "FrozenModel",
    "DataSource",
    "PipelineStage",
    "PriceHistory",
    "ProductRecord",
    "CompetitorRecord",
    "PriceRange",
    "MarketInsights",
    "MarketSummary",
    "BenchmarkRequest",
    "StageOutcome",
    "BenchmarkReport",
    "ErrorResponse",
    "IDENTIFIER_PATTERN",
    "MAX_COMPETITORS",
    "MAX_KEYWORDS",
    "MAX_TOP_KEYWORDS",
    "normalize_identifier",
    "validate_identifier",
    "validate_marketplace",
    "Fallback",
    "FallbackReason",
    "Live",
    "Resolution",
]
