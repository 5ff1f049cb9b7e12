"""
Product Resolver (Stage 1).

Turns an identifier into a canonical ProductRecord. One live attempt is made
against the Selling Partner API; missing credentials, a failed call or a
payload that does not validate degrade to the static product table.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from product_optimizer.config.resolver import ResolverConfig
from product_optimizer.data.fallback_tables import lookup_product
from product_optimizer.models.resolution import Fallback, FallbackReason, Live, Resolution
from product_optimizer.models.schemas import (
    MAX_KEYWORDS,
    PipelineStage,
    PriceHistory,
    ProductRecord,
    validate_identifier,
)
from product_optimizer.services.sp_api_client import SellingPartnerClient
from product_optimizer.utils.errors import MissingCredentialsError, UpstreamUnavailableError
from product_optimizer.utils.extraction import (
    Estimator,
    extract_category_id,
    extract_category_name,
    extract_keywords,
    extract_price,
    extract_rankings,
    extract_rating,
    extract_review_count,
    extract_title,
    price_history_band,
)
from product_optimizer.utils.logger import get_logger

logger = get_logger(__name__)


def product_from_payload(identifier: str, data: dict[str, Any]) -> ProductRecord:
    """
    Map a catalog item payload onto a ProductRecord.

    Raises:
        pydantic.ValidationError: If the mapped values break record invariants
    """
    estimator = Estimator(identifier)
    price = extract_price(data)
    category_name = extract_category_name(data)
    low, high = price_history_band(price)

    return ProductRecord(
        identifier=identifier,
        title=extract_title(data, default=f"Product {identifier}"),
        price=price,
        rating=extract_rating(data),
        review_count=extract_review_count(data),
        category_id=extract_category_id(data),
        category_name=category_name,
        keywords=tuple(extract_keywords(data, limit=MAX_KEYWORDS)),
        price_history=PriceHistory(min=low, max=high),
        ranking_info=extract_rankings(data, category_name, estimator),
        estimated_sales=estimator.estimated_sales(),
        market_share=estimator.market_share(),
    )


class ProductResolver:
    """
    Resolves identifiers to product records, live first.

    Example:
        >>> resolver = ProductResolver(config, client)
        >>> result = await resolver.resolve("b01dfkc2so")
        >>> result.data.title
        'Premium Wireless Headphones'
    """

    def __init__(self, config: ResolverConfig, client: SellingPartnerClient):
        self.config = config
        self.client = client

    def _fallback(self, identifier: str) -> ProductRecord:
        return lookup_product(identifier, self.config.fallback_table)

    async def resolve(self, identifier: str) -> Resolution[ProductRecord]:
        """
        Resolve one product.

        Args:
            identifier: ASIN in any case, surrounding whitespace allowed

        Returns:
            Live(record) or Fallback(record, reason)

        Raises:
            InvalidIdentifierError: If the identifier is missing or malformed
        """
        identifier = validate_identifier(identifier)

        try:
            payload = await self.client.get_item(identifier)
            record = product_from_payload(identifier, payload)
        except MissingCredentialsError as e:
            logger.warning(
                "Product lookup falling back to static data",
                stage=PipelineStage.PRODUCT.value,
                identifier=identifier,
                reason=FallbackReason.MISSING_CREDENTIALS.value,
            )
            return Fallback(self._fallback(identifier), FallbackReason.MISSING_CREDENTIALS, e.message)
        except UpstreamUnavailableError as e:
            logger.warning(
                "Product lookup falling back to static data",
                stage=PipelineStage.PRODUCT.value,
                identifier=identifier,
                reason=FallbackReason.UPSTREAM_UNAVAILABLE.value,
                error=e.message,
                status_code=e.status_code,
            )
            return Fallback(self._fallback(identifier), FallbackReason.UPSTREAM_UNAVAILABLE, e.message)
        except ValidationError as e:
            logger.warning(
                "Product payload rejected, falling back to static data",
                stage=PipelineStage.PRODUCT.value,
                identifier=identifier,
                reason=FallbackReason.UPSTREAM_UNAVAILABLE.value,
                error_count=e.error_count(),
            )
            return Fallback(
                self._fallback(identifier),
                FallbackReason.UPSTREAM_UNAVAILABLE,
                "malformed product payload",
            )

        logger.info(
            "Product resolved from live catalog",
            stage=PipelineStage.PRODUCT.value,
            identifier=identifier,
            category_id=record.category_id,
        )
        return Live(record)
