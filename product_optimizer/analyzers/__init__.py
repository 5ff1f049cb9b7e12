"""
Analyzers package for the Product Optimizer.

Components:
    - aggregate: Stage 3, pure market statistics
    - InsightGenerator: Stage 4, Claude narrative with template fallback
"""

from product_optimizer.analyzers.market_aggregator import (
    aggregate,
    compute_insights,
    rank_keywords,
)
from product_optimizer.analyzers.insight_generator import (
    InsightGenerator,
    build_prompt,
    render_fallback_insights,
)

__all__ = [
    "aggregate",
    "compute_insights",
    "rank_keywords",
    "InsightGenerator",
    "build_prompt",
    "render_fallback_insights",
]
