"""
Demo Runner Script for the Product Optimizer.

Benchmarks the three catalog products that ship with static fallback data,
one per category:
- "B01DFKC2SO": Premium Wireless Headphones (Electronics)
- "B07X2LSDM3": Smart Coffee Maker (Home & Kitchen)
- "B083TF7YD9": Ultralight Camping Tent (Sports & Outdoors)

Without credentials every stage falls back, so the demo runs offline.
Reports are saved to outputs/demo_reports/
"""

import asyncio
import sys
from datetime import datetime
from pathlib import Path

from product_optimizer.pipeline.orchestrator import BenchmarkPipeline
from product_optimizer.utils.errors import AppError
from product_optimizer.utils.formatters import ReportFormatter
from product_optimizer.utils.logger import get_logger, setup_logging

# Setup logging
setup_logging(level="WARNING", json_format=False)
logger = get_logger(__name__)


# Demo products to benchmark
DEMO_PRODUCTS = [
    {"identifier": "B01DFKC2SO", "description": "Premium headphones against budget and studio competitors"},
    {"identifier": "B07X2LSDM3", "description": "Smart coffee maker in a wide price band"},
    {"identifier": "B083TF7YD9", "description": "Camping tent with a small competitor set"},
]

# Output directory for demo reports
OUTPUT_DIR = Path("outputs/demo_reports")

STAGES = ["resolve_product", "resolve_competitors", "aggregate", "generate_insights"]


def progress_callback(node: str) -> None:
    """Callback to display progress updates."""
    percent = int(100 * (STAGES.index(node) + 1) / len(STAGES)) if node in STAGES else 0
    bar_length = 30
    filled = int(bar_length * percent / 100)
    bar = "█" * filled + "░" * (bar_length - filled)
    print(f"\r  [{bar}] {percent:3d}% - {node}", end="", flush=True)


async def benchmark_one(product_info: dict) -> dict:
    """
    Benchmark a single product and return a results summary.

    Args:
        product_info: Dict with identifier and description

    Returns:
        Dict with benchmark results or error info
    """
    identifier = product_info["identifier"]
    start_time = datetime.now()

    try:
        # One pipeline per request
        async with BenchmarkPipeline(progress_callback=progress_callback) as pipeline:
            report = await pipeline.run(identifier)

        duration = (datetime.now() - start_time).total_seconds()

        formatter = ReportFormatter()
        json_path = OUTPUT_DIR / f"{identifier}.json"
        md_path = OUTPUT_DIR / f"{identifier}.md"
        json_path.write_text(formatter.format(report, "json"), encoding="utf-8")
        md_path.write_text(formatter.format(report, "markdown"), encoding="utf-8")

        return {
            "status": "success",
            "identifier": identifier,
            "duration_seconds": round(duration, 2),
            "category": report.category,
            "competitor_count": len(report.competitors),
            "average_price": report.market_insights.average_price,
            "degraded": report.degraded,
            "report_path": str(json_path),
        }

    except AppError as e:
        duration = (datetime.now() - start_time).total_seconds()
        return {
            "status": "error",
            "identifier": identifier,
            "duration_seconds": round(duration, 2),
            "error_message": e.message,
            "error_type": e.error_type.value,
        }


async def run_demo():
    """
    Run the demo benchmark on all demo products.
    """
    print("\n" + "=" * 70)
    print("  Product Optimizer - Demo Runner")
    print("=" * 70)
    print(f"\n  Benchmarking {len(DEMO_PRODUCTS)} products...")
    print(f"  Reports will be saved to: {OUTPUT_DIR.absolute()}")
    print()

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    results = []
    for i, product_info in enumerate(DEMO_PRODUCTS, 1):
        print(f"\n{'=' * 70}")
        print(f"  [{i}/{len(DEMO_PRODUCTS)}] Benchmarking: {product_info['identifier']}")
        print(f"  {product_info['description']}")
        print("=" * 70)

        result = await benchmark_one(product_info)
        results.append(result)

        print()  # New line after progress bar
        if result["status"] == "success":
            print(f"\n  ✓ SUCCESS")
            print(f"    Duration: {result['duration_seconds']}s")
            print(f"    Category: {result['category']} ({result['competitor_count']} competitors)")
            print(f"    Average Price: ${result['average_price']:.2f}")
            print(f"    Degraded: {result['degraded']}")
            print(f"    Report: {result['report_path']}")
        else:
            print(f"\n  ✗ ERROR: {result['error_type']}")
            print(f"    Message: {result['error_message']}")

    successful = [r for r in results if r["status"] == "success"]

    print("\n" + "=" * 70)
    print("  DEMO SUMMARY")
    print("=" * 70)
    print(f"\n  Successful: {len(successful)}/{len(results)}")
    print(f"  Reports saved to: {OUTPUT_DIR.absolute()}")
    print("=" * 70 + "\n")

    return results


if __name__ == "__main__":
    try:
        results = asyncio.run(run_demo())
        sys.exit(sum(1 for r in results if r["status"] != "success"))
    except KeyboardInterrupt:
        print("\n\n  Demo interrupted by user.")
        sys.exit(1)
    except Exception as e:
        print(f"\n  Fatal error: {e}")
        logger.exception("Demo runner failed")
        sys.exit(1)
