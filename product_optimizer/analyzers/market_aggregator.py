"""
Market Aggregator (Stage 3).

Pure arithmetic over the competitor set: no I/O, no clock, no randomness,
so identical inputs always produce identical summaries.
"""

from statistics import fmean
from typing import Iterable, Sequence

from product_optimizer.models.schemas import (
    MAX_COMPETITORS,
    MAX_TOP_KEYWORDS,
    CompetitorRecord,
    MarketInsights,
    MarketSummary,
    PriceRange,
    ProductRecord,
)
from product_optimizer.utils.errors import EmptyCompetitorSetError

# Averages are reported in cents / hundredths of a star
ROUNDING_DIGITS = 2


def rank_keywords(
    competitors: Iterable[CompetitorRecord],
    limit: int = MAX_TOP_KEYWORDS,
) -> tuple[str, ...]:
    """
    Most frequent competitor keywords.

    Sorted by count descending; equal counts keep the order in which the
    keywords were first seen while scanning competitors in order.
    """
    counts: dict[str, int] = {}
    for competitor in competitors:
        for keyword in competitor.keywords:
            counts[keyword] = counts.get(keyword, 0) + 1

    # sorted() is stable and dicts keep insertion order
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return tuple(keyword for keyword, _ in ranked[:limit])


def compute_insights(competitors: Sequence[CompetitorRecord]) -> MarketInsights:
    """Statistics for a non-empty competitor sequence."""
    if not competitors:
        raise EmptyCompetitorSetError("Cannot aggregate an empty competitor set")

    prices = [c.price for c in competitors]
    return MarketInsights(
        total_market_size=sum(c.estimated_sales for c in competitors),
        average_price=round(fmean(prices), ROUNDING_DIGITS),
        average_rating=round(fmean(c.rating for c in competitors), ROUNDING_DIGITS),
        price_range=PriceRange(min=min(prices), max=max(prices)),
        top_keywords=rank_keywords(competitors),
    )


def aggregate(
    target: ProductRecord,
    competitors: Sequence[CompetitorRecord],
) -> MarketSummary:
    """
    Combine the target and its competitors into a MarketSummary.

    Only the first five competitors are considered.

    Raises:
        EmptyCompetitorSetError: If competitors is empty
    """
    selected = tuple(competitors)[:MAX_COMPETITORS]
    insights = compute_insights(selected)
    return MarketSummary(
        category=target.category_name,
        target_product=target,
        competitors=selected,
        market_insights=insights,
    )
