"""Static fallback data for the benchmarking pipeline."""

from product_optimizer.data.fallback_tables import (
    COMPETITOR_TABLE,
    DEFAULT_KEY,
    PRODUCT_TABLE,
    lookup_competitors,
    lookup_product,
)

__all__ = [
    "COMPETITOR_TABLE",
    "DEFAULT_KEY",
    "PRODUCT_TABLE",
    "lookup_competitors",
    "lookup_product",
]
