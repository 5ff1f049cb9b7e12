"""
Pydantic models and schemas for the benchmarking pipeline.

This module defines all data structures passed between pipeline stages,
ensuring type safety, validation, and serialization consistency.

Models:
    - ProductRecord: Canonical target product (Stage 1 output)
    - CompetitorRecord: Category competitor with sales estimates (Stage 2 output)
    - MarketInsights / MarketSummary: Aggregated statistics (Stage 3 output)
    - BenchmarkRequest: Inbound request
    - BenchmarkReport: Complete response including narrative
    - ErrorResponse: Standardized error payload
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Self

from pydantic import (
    AliasChoices,
    BaseModel as PydanticBaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from product_optimizer.config.resolver import MARKETPLACE_IDS
from product_optimizer.utils.errors import (
    ErrorType,
    InvalidIdentifierError,
    MissingIdentifierError,
    UnsupportedMarketplaceError,
)


# =============================================================================
# Base Configuration
# =============================================================================

class BaseModel(PydanticBaseModel):
    """Base model with common configuration for all schemas."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_json(self, **kwargs) -> str:
        """Serialize model to JSON string."""
        return self.model_dump_json(indent=2, **kwargs)

    def to_dict(self, **kwargs) -> dict[str, Any]:
        """Serialize model to dictionary."""
        return self.model_dump(mode="json", **kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> Self:
        """Deserialize model from JSON string."""
        return cls.model_validate_json(json_str)


class FrozenModel(BaseModel):
    """Immutable record shared safely between requests."""

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Enums
# =============================================================================

class DataSource(str, Enum):
    """Where a stage's output came from."""
    LIVE = "live"
    FALLBACK = "fallback"


class PipelineStage(str, Enum):
    """Pipeline execution stages."""
    PRODUCT = "product"
    COMPETITORS = "competitors"
    AGGREGATION = "aggregation"
    INSIGHTS = "insights"


# =============================================================================
# Validators (Reusable)
# =============================================================================

IDENTIFIER_PATTERN = re.compile(r"^[A-Z0-9]{9,10}$")

MAX_KEYWORDS = 4
MAX_COMPETITORS = 5
MAX_TOP_KEYWORDS = 10


def normalize_identifier(identifier: str) -> str:
    """Trim and uppercase an identifier without validating its shape."""
    return identifier.strip().upper()


def validate_identifier(identifier: Optional[str]) -> str:
    """
    Normalize and validate a product identifier (ASIN).

    Raises:
        MissingIdentifierError: If the identifier is None or blank
        InvalidIdentifierError: If it is not 9-10 uppercase alphanumerics
    """
    if identifier is None or not str(identifier).strip():
        raise MissingIdentifierError("Identifier is required.")

    normalized = normalize_identifier(str(identifier))
    if not IDENTIFIER_PATTERN.match(normalized):
        raise InvalidIdentifierError(
            "Invalid identifier format.",
            details={"identifier": normalized},
        )
    return normalized


def validate_marketplace(marketplace: Optional[str]) -> str:
    """Normalize a storefront domain and check it is a known marketplace."""
    value = (marketplace or "amazon.com").strip().lower()
    if value.startswith("www."):
        value = value[4:]
    if value not in MARKETPLACE_IDS:
        raise UnsupportedMarketplaceError(
            "Unsupported marketplace.",
            details={"marketplace": value},
        )
    return value


# =============================================================================
# Product Models
# =============================================================================

class PriceHistory(FrozenModel):
    """Observed price band for a product."""

    min: float = Field(..., ge=0, description="Lowest observed price")
    max: float = Field(..., ge=0, description="Highest observed price")

    @model_validator(mode="after")
    def check_order(self) -> Self:
        if self.min > self.max:
            raise ValueError("price history min must not exceed max")
        return self


class ProductRecord(FrozenModel):
    """
    Canonical product record.

    Example:
        >>> product = ProductRecord(
        ...     identifier="B01DFKC2SO",
        ...     title="Premium Wireless Headphones",
        ...     price=199.99,
        ...     rating=4.7,
        ...     review_count=3250,
        ...     category_id="electronics",
        ...     category_name="Electronics",
        ...     keywords=("wireless", "premium"),
        ...     price_history=PriceHistory(min=179.99, max=219.99),
        ... )
    """

    identifier: str = Field(
        ...,
        min_length=1,
        max_length=20,
        description="Amazon Standard Identification Number, uppercase",
        examples=["B01DFKC2SO"],
    )
    title: str = Field(..., min_length=1, max_length=500)
    price: float = Field(..., ge=0, description="Current price in marketplace currency")
    rating: float = Field(..., ge=0.0, le=5.0, description="Average star rating")
    review_count: int = Field(default=0, ge=0)
    category_id: str = Field(..., min_length=1)
    category_name: str = Field(..., min_length=1)
    keywords: tuple[str, ...] = Field(
        default=(),
        max_length=MAX_KEYWORDS,
        description="Ordered listing keywords",
    )
    price_history: PriceHistory
    ranking_info: Mapping[str, int] = Field(
        default_factory=dict,
        validate_default=True,
        description="Best-seller rank per ranking category",
    )
    estimated_sales: Optional[int] = Field(default=None, ge=0)
    market_share: Optional[float] = Field(default=None, ge=0, le=100)

    @field_validator("identifier", mode="before")
    @classmethod
    def uppercase_identifier(cls, v: str) -> str:
        return normalize_identifier(v) if isinstance(v, str) else v

    @field_validator("ranking_info", mode="after")
    @classmethod
    def freeze_ranking_info(cls, v: Mapping[str, int]) -> Mapping[str, int]:
        return MappingProxyType(dict(v))

    @field_serializer("ranking_info")
    def serialize_ranking_info(self, value: Mapping[str, int]) -> dict[str, int]:
        return dict(value)


class CompetitorRecord(ProductRecord):
    """
    Competitor in the target's category.

    Market share is an independent per-record estimate; shares across a
    category are not normalized and need not sum to 100.
    """

    estimated_sales: int = Field(..., ge=0, description="Estimated monthly unit sales")
    market_share: float = Field(..., ge=0, le=100, description="Estimated share, percent")


# =============================================================================
# Aggregation Models
# =============================================================================

class PriceRange(FrozenModel):
    min: float
    max: float


class MarketInsights(FrozenModel):
    """Statistics derived from the competitor set."""

    total_market_size: int = Field(..., ge=0, description="Sum of competitor estimated sales")
    average_price: float = Field(..., ge=0)
    average_rating: float = Field(..., ge=0, le=5)
    price_range: PriceRange
    top_keywords: tuple[str, ...] = Field(default=(), max_length=MAX_TOP_KEYWORDS)


class MarketSummary(FrozenModel):
    """Target product, its competitors and the derived market insights."""

    category: str = Field(..., description="Category display name")
    target_product: ProductRecord
    competitors: tuple[CompetitorRecord, ...] = Field(..., min_length=1, max_length=MAX_COMPETITORS)
    market_insights: MarketInsights


# =============================================================================
# Request / Response Models
# =============================================================================

class BenchmarkRequest(BaseModel):
    """
    Inbound benchmarking request.

    The identifier is accepted raw so that a missing or malformed value can
    be reported with the exact public message rather than a schema error.
    """

    identifier: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("identifier", "asin"),
        examples=["B01DFKC2SO"],
    )
    marketplace: Optional[str] = Field(default=None, examples=["amazon.com"])


class StageOutcome(FrozenModel):
    """Whether a stage ran live or degraded to its fallback."""

    source: DataSource
    reason: Optional[str] = None


class BenchmarkReport(MarketSummary):
    """MarketSummary augmented with the narrative and run metadata."""

    marketplace: str = "amazon.com"
    ai_insights: str
    data_sources: dict[str, StageOutcome] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def degraded(self) -> bool:
        """True when any stage fell back to static data."""
        return any(o.source == DataSource.FALLBACK for o in self.data_sources.values())

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        """Serialize timestamp as ISO 8601 UTC with a Z suffix."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class ErrorResponse(BaseModel):
    """Standardized error payload returned at the request boundary."""

    error: str
    error_type: ErrorType = ErrorType.INTERNAL_ERROR
