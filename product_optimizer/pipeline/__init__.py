"""Pipeline module for the Product Optimizer."""

from product_optimizer.pipeline.orchestrator import (
    BenchmarkPipeline,
    BenchmarkState,
    PipelineError,
    benchmark_product,
)

__all__ = [
    "BenchmarkPipeline",
    "BenchmarkState",
    "PipelineError",
    "benchmark_product",
]
