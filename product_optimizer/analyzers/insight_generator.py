"""
Insight Generator (Stage 4).

Produces the strategic narrative for a MarketSummary. Claude writes it when
an API key is configured; otherwise, or when the call fails, a deterministic
template is rendered from the summary alone.
"""

from __future__ import annotations

from typing import Optional

from product_optimizer.analyzers.prompts import (
    FALLBACK_TEMPLATE,
    INSIGHT_SYSTEM_PROMPT,
    INSIGHT_USER_PROMPT,
)
from product_optimizer.models.resolution import Fallback, FallbackReason, Live, Resolution
from product_optimizer.models.schemas import MarketSummary, PipelineStage
from product_optimizer.services.llm_service import ClaudeService
from product_optimizer.utils.errors import LLMServiceError
from product_optimizer.utils.logger import get_logger

logger = get_logger(__name__)


def _segment(price: float, average_price: float) -> str:
    if price > average_price * 1.1:
        return "premium"
    if price < average_price * 0.9:
        return "value"
    return "mid-range"


def _price_position(price: float, low: float, high: float) -> str:
    if price > high:
        return "above"
    if price < low:
        return "below"
    return "competitive within"


def render_fallback_insights(summary: MarketSummary) -> str:
    """
    Deterministic narrative built only from the summary.

    Interpolates target price, market share, rating vs. average rating,
    review count, keywords, the recommended price band and the top three
    competitor keywords.
    """
    target = summary.target_product
    insights = summary.market_insights
    low, high = insights.price_range.min, insights.price_range.max

    if target.market_share is None:
        market_share = "n/a"
        share_strength = "an unmeasured"
    else:
        market_share = f"{target.market_share:g}%"
        share_strength = "strong" if target.market_share >= 15 else "a developing"

    keywords = list(target.keywords) or ["its core features"]
    advantages = " and ".join(keywords[:2])

    return FALLBACK_TEMPLATE.format(
        category=summary.category,
        segment=_segment(target.price, insights.average_price),
        price=target.price,
        price_position=_price_position(target.price, low, high),
        range_min=low,
        range_max=high,
        market_share=market_share,
        share_strength=share_strength,
        rating=target.rating,
        average_rating=insights.average_rating,
        review_count=target.review_count,
        review_strength="strong" if target.review_count >= 1000 else "early",
        keywords=", ".join(keywords),
        top_keywords=", ".join(insights.top_keywords[:3]) or "n/a",
        advantages=advantages,
    )


def build_prompt(summary: MarketSummary) -> tuple[str, str]:
    """System and user prompts for Claude."""
    system = INSIGHT_SYSTEM_PROMPT.format(category=summary.category)
    user = INSIGHT_USER_PROMPT.format(
        category=summary.category,
        market_data=summary.model_dump_json(indent=2),
    )
    return system, user


class InsightGenerator:
    """
    Narrative generation with template fallback.

    Example:
        >>> generator = InsightGenerator(llm_service=None)
        >>> result = await generator.generate_insights(summary)
        >>> result.is_fallback
        True
    """

    def __init__(self, llm_service: Optional[ClaudeService] = None):
        self.llm_service = llm_service

    async def generate_insights(self, summary: MarketSummary) -> Resolution[str]:
        """
        Generate insights for a summary.

        Returns:
            Live(text) from Claude or Fallback(template_text, reason)
        """
        identifier = summary.target_product.identifier

        if self.llm_service is None:
            logger.warning(
                "Insight generation using template",
                stage=PipelineStage.INSIGHTS.value,
                identifier=identifier,
                reason=FallbackReason.MISSING_CREDENTIALS.value,
            )
            return Fallback(
                render_fallback_insights(summary),
                FallbackReason.MISSING_CREDENTIALS,
                "Anthropic API key not configured",
            )

        system, prompt = build_prompt(summary)
        try:
            text = await self.llm_service.generate_text(prompt, system=system)
        except LLMServiceError as e:
            logger.warning(
                "Insight generation using template",
                stage=PipelineStage.INSIGHTS.value,
                identifier=identifier,
                reason=FallbackReason.UPSTREAM_UNAVAILABLE.value,
                error=e.message,
            )
            return Fallback(
                render_fallback_insights(summary),
                FallbackReason.UPSTREAM_UNAVAILABLE,
                e.message,
            )

        return Live(text)
