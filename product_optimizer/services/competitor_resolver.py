"""
Competitor Resolver (Stage 2).

Finds up to five competitors in the target's category. The live catalog
search result is filtered to drop the target itself and truncated in
response order; an empty live result, like a failed one, degrades to the
per-category static table.
"""

from __future__ import annotations

from typing import Any, Iterable

from pydantic import ValidationError

from product_optimizer.config.resolver import ResolverConfig
from product_optimizer.data.fallback_tables import lookup_competitors
from product_optimizer.models.resolution import Fallback, FallbackReason, Live, Resolution
from product_optimizer.models.schemas import (
    MAX_COMPETITORS,
    MAX_KEYWORDS,
    CompetitorRecord,
    PipelineStage,
    PriceHistory,
    normalize_identifier,
)
from product_optimizer.services.sp_api_client import SellingPartnerClient
from product_optimizer.utils.errors import MissingCredentialsError, UpstreamUnavailableError
from product_optimizer.utils.extraction import (
    Estimator,
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


def competitor_from_item(item: dict[str, Any], category_id: str) -> CompetitorRecord:
    """
    Map a catalog search item onto a CompetitorRecord.

    Raises:
        pydantic.ValidationError: If the mapped values break record invariants
    """
    identifier = normalize_identifier(str(item.get("asin", "")))
    estimator = Estimator(identifier)
    price = extract_price(item)
    category_name = extract_category_name(item)
    low, high = price_history_band(price)

    return CompetitorRecord(
        identifier=identifier,
        title=extract_title(item, default="Competitor Product"),
        price=price,
        rating=extract_rating(item),
        review_count=extract_review_count(item),
        category_id=category_id,
        category_name=category_name,
        keywords=tuple(extract_keywords(item, limit=MAX_KEYWORDS)),
        price_history=PriceHistory(min=low, max=high),
        ranking_info=extract_rankings(item, category_name, estimator),
        estimated_sales=estimator.estimated_sales(),
        market_share=estimator.market_share(),
    )


def _excluding(records: Iterable[CompetitorRecord], exclude_identifier: str) -> list[CompetitorRecord]:
    return [r for r in records if r.identifier != exclude_identifier]


class CompetitorResolver:
    """
    Resolves a category into a bounded competitor list, live first.

    Example:
        >>> resolver = CompetitorResolver(config, client)
        >>> result = await resolver.resolve_competitors("electronics", "B01DFKC2SO")
        >>> len(result.data)
        3
    """

    def __init__(
        self,
        config: ResolverConfig,
        client: SellingPartnerClient,
        max_competitors: int = MAX_COMPETITORS,
    ):
        self.config = config
        self.client = client
        self.max_competitors = max_competitors

    def _fallback(self, category_id: str, exclude_identifier: str) -> list[CompetitorRecord]:
        bucket = lookup_competitors(category_id, self.config.fallback_table)
        return _excluding(bucket, exclude_identifier)[: self.max_competitors]

    def _degrade(
        self,
        category_id: str,
        exclude_identifier: str,
        reason: FallbackReason,
        detail: str,
    ) -> Fallback[list[CompetitorRecord]]:
        logger.warning(
            "Competitor lookup falling back to static data",
            stage=PipelineStage.COMPETITORS.value,
            identifier=exclude_identifier,
            category_id=category_id,
            reason=reason.value,
            error=detail,
        )
        return Fallback(self._fallback(category_id, exclude_identifier), reason, detail)

    async def resolve_competitors(
        self,
        category_id: str,
        exclude_identifier: str,
    ) -> Resolution[list[CompetitorRecord]]:
        """
        Resolve competitors for a category.

        Args:
            category_id: Category id taken from the target product
            exclude_identifier: Target identifier, never returned as a competitor

        Returns:
            Live(records) or Fallback(records, reason); 1 to 5 records either way
        """
        exclude_identifier = normalize_identifier(exclude_identifier)

        try:
            items = await self.client.search_catalog(category_id)
            candidates = [
                item for item in items
                if item.get("asin")
                and normalize_identifier(str(item["asin"])) != exclude_identifier
            ][: self.max_competitors]
            records = [competitor_from_item(item, category_id) for item in candidates]
        except MissingCredentialsError as e:
            return self._degrade(category_id, exclude_identifier, FallbackReason.MISSING_CREDENTIALS, e.message)
        except UpstreamUnavailableError as e:
            return self._degrade(category_id, exclude_identifier, FallbackReason.UPSTREAM_UNAVAILABLE, e.message)
        except ValidationError:
            return self._degrade(
                category_id,
                exclude_identifier,
                FallbackReason.UPSTREAM_UNAVAILABLE,
                "malformed competitor payload",
            )

        if not records:
            return self._degrade(
                category_id,
                exclude_identifier,
                FallbackReason.EMPTY_RESULT,
                "no competitors after filtering",
            )

        logger.info(
            "Competitors resolved from live catalog",
            stage=PipelineStage.COMPETITORS.value,
            category_id=category_id,
            results_count=len(records),
        )
        return Live(records)
