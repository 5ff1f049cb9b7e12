"""
Report formatting utilities.

Renders a BenchmarkReport as Markdown (for humans and the CLI) or JSON.
"""

from typing import Iterable, Literal

from product_optimizer.models.schemas import BenchmarkReport, CompetitorRecord, MarketInsights

ReportFormat = Literal["markdown", "json"]


def _cell(value: str) -> str:
    return value.replace("|", "-")


def format_market_table(insights: MarketInsights) -> str:
    """
    Create formatted markdown table for market metrics.

    | Metric | Value |
    |--------|-------|
    | Market Size | 39,800 units |
    | Avg Price | $159.99 |
    """
    rows = [
        f"| Market Size | {insights.total_market_size:,} units |",
        f"| Avg Price | ${insights.average_price:.2f} |",
        f"| Avg Rating | {insights.average_rating:.2f} ⭐ |",
        f"| Price Range | ${insights.price_range.min:.2f} - ${insights.price_range.max:.2f} |",
        f"| Top Keywords | {_cell(', '.join(insights.top_keywords)) or 'N/A'} |",
    ]
    header = "| Metric | Value |\n|--------|-------|"
    return header + "\n" + "\n".join(rows)


def format_competitors_table(competitors: Iterable[CompetitorRecord]) -> str:
    """
    Create formatted markdown table for competitors.

    | ASIN | Product | Price | Rating | Reviews | Share |
    """
    competitors = list(competitors)
    if not competitors:
        return "*No competitors found.*"

    header = (
        "| ASIN | Product | Price | Rating | Reviews | Share |\n"
        "|------|---------|-------|--------|---------|-------|"
    )
    rows = []
    for comp in competitors:
        title = comp.title[:60] + "..." if len(comp.title) > 60 else comp.title
        rows.append(
            f"| {comp.identifier} | {_cell(title)} | ${comp.price:.2f} | "
            f"{comp.rating:.1f}⭐ | {comp.review_count:,} | {comp.market_share:g}% |"
        )
    return header + "\n" + "\n".join(rows)


def format_data_sources(report: BenchmarkReport) -> str:
    lines = []
    for stage, outcome in report.data_sources.items():
        suffix = f" ({outcome.reason})" if outcome.reason else ""
        lines.append(f"- **{stage}**: {outcome.source}{suffix}")
    return "\n".join(lines) or "- n/a"


def generate_markdown_report(report: BenchmarkReport) -> str:
    """
    Full Markdown report.

    Structure:
    # Competitive Benchmark: {title}
    ## Target Product
    ## Market Overview
    ## Competitors
    ## Strategic Insights
    ## Data Sources
    """
    target = report.target_product
    generated = report.timestamp.strftime("%Y-%m-%d %H:%M UTC")

    return f"""# Competitive Benchmark: {target.title}

*{target.identifier} on {report.marketplace}, {report.category}. Generated {generated}.*

## Target Product
| Metric | Value |
|--------|-------|
| Price | ${target.price:.2f} |
| Rating | {target.rating:.1f} ⭐ |
| Reviews | {target.review_count:,} |
| Keywords | {_cell(', '.join(target.keywords)) or 'N/A'} |

## Market Overview
{format_market_table(report.market_insights)}

## Competitors
{format_competitors_table(report.competitors)}

## Strategic Insights
{report.ai_insights}

## Data Sources
{format_data_sources(report)}
"""


class ReportFormatter:
    """Formats benchmark reports for output."""

    def format(self, report: BenchmarkReport, format: ReportFormat = "markdown") -> str:
        if format == "json":
            return report.to_json()
        if format == "markdown":
            return generate_markdown_report(report)
        raise ValueError(f"Unsupported report format: {format}")
