import json
from datetime import datetime, timezone

import pytest

from product_optimizer.models.resolution import Fallback, FallbackReason, Live
from product_optimizer.models.schemas import BenchmarkReport
from product_optimizer.utils.formatters import (
    ReportFormatter,
    format_competitors_table,
    format_market_table,
)


@pytest.fixture
def sample_report(sample_summary):
    return BenchmarkReport(
        **sample_summary.model_dump(),
        ai_insights="1. Market Position: mid-range.",
        timestamp=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
        data_sources={
            "product": Live(None).outcome(),
            "insights": Fallback(None, FallbackReason.MISSING_CREDENTIALS).outcome(),
        },
    )


def test_format_market_table(sample_summary):
    table = format_market_table(sample_summary.market_insights)
    assert "| Market Size | 3,500 units |" in table
    assert "| Avg Price | $110.00 |" in table
    assert "| Price Range | $80.00 - $150.00 |" in table
    assert "wireless, bass, portable, budget" in table


def test_format_competitors_table(sample_competitors):
    table = format_competitors_table(sample_competitors)
    lines = table.splitlines()
    assert lines[0].startswith("| ASIN | Product | Price")
    assert len(lines) == 2 + len(sample_competitors)
    assert "| B0COMP0001 | Competitor B0COMP0001 | $100.00 |" in table


def test_format_competitors_table_empty():
    assert format_competitors_table([]) == "*No competitors found.*"


def test_markdown_report(sample_report):
    report = ReportFormatter().format(sample_report, "markdown")
    assert report.startswith("# Competitive Benchmark: Test Wireless Speaker")
    assert "Generated 2024-05-01 12:30 UTC" in report
    assert "## Strategic Insights\n1. Market Position: mid-range." in report
    assert "- **insights**: fallback (missing_credentials)" in report
    assert "- **product**: live" in report


def test_json_report(sample_report):
    data = json.loads(ReportFormatter().format(sample_report, "json"))
    assert data["target_product"]["identifier"] == "B0TARGET01"
    assert data["timestamp"] == "2024-05-01T12:30:00Z"


def test_unknown_format(sample_report):
    with pytest.raises(ValueError):
        ReportFormatter().format(sample_report, "pdf")
