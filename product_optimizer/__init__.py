"""
Product Optimizer.

Competitive benchmarking pipeline for Amazon listings: resolves a product and
its category competitors from the Selling Partner API (with static fallback
tables), aggregates market statistics and generates strategic insights with
Claude or a deterministic template.
"""

__version__ = "1.0.0"
__author__ = "Product Optimizer Team"

# Lazy imports to avoid circular dependencies
def get_pipeline():
    """Get the BenchmarkPipeline class (lazy import)."""
    from product_optimizer.pipeline.orchestrator import BenchmarkPipeline
    return BenchmarkPipeline

__all__ = ["get_pipeline", "__version__"]
