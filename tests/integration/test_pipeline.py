from types import MappingProxyType
from unittest.mock import patch

import httpx
import pytest
from conftest import make_transport

from product_optimizer.analyzers.insight_generator import render_fallback_insights
from product_optimizer.analyzers.market_aggregator import aggregate
from product_optimizer.data.fallback_tables import COMPETITOR_TABLE, PRODUCT_TABLE
from product_optimizer.models.schemas import DataSource
from product_optimizer.pipeline.orchestrator import BenchmarkPipeline, PipelineError, benchmark_product
from product_optimizer.utils.errors import (
    EmptyCompetitorSetError,
    InvalidIdentifierError,
    MissingIdentifierError,
    UnsupportedMarketplaceError,
)


@pytest.mark.asyncio
async def test_pipeline_fallback_run(settings):
    nodes = []
    async with BenchmarkPipeline(settings=settings, progress_callback=nodes.append) as pipeline:
        report = await pipeline.run(" b01dfkc2so ")

    assert nodes == ["resolve_product", "resolve_competitors", "aggregate", "generate_insights"]
    assert report.target_product.identifier == "B01DFKC2SO"
    assert report.target_product.title == "Premium Wireless Headphones"
    assert report.category == "Electronics"
    assert report.marketplace == "amazon.com"
    assert [c.identifier for c in report.competitors] == ["B08X7JL3QL", "B07NDFT2NB", "B09KL7SV1M"]
    assert report.market_insights.average_price == 159.99
    assert report.market_insights.total_market_size == 39800
    assert report.ai_insights == render_fallback_insights(
        aggregate(PRODUCT_TABLE["B01DFKC2SO"], COMPETITOR_TABLE["electronics"])
    )
    assert report.degraded is True
    assert report.data_sources["product"].source == DataSource.FALLBACK
    assert report.data_sources["competitors"].reason == "missing_credentials"
    assert report.data_sources["insights"].reason == "missing_credentials"


@pytest.mark.asyncio
async def test_pipeline_unknown_identifier_uses_defaults(settings):
    report = await benchmark_product("B000000000", settings=settings)

    assert report.target_product.title == "Sample Product"
    assert report.category == "Electronics"
    assert len(report.competitors) == 3


@pytest.mark.asyncio
async def test_repeated_runs_agree(settings):
    first = await benchmark_product("B07X2LSDM3", settings=settings)
    second = await benchmark_product("B07X2LSDM3", settings=settings)

    assert first.market_insights == second.market_insights
    assert first.ai_insights == second.ai_insights
    assert first.category == "Home & Kitchen"


@pytest.mark.asyncio
async def test_pipeline_live_run(live_settings, catalog_item, catalog_items, mock_llm_service):
    http_client = httpx.AsyncClient(transport=make_transport(item=catalog_item, items=catalog_items))

    async with BenchmarkPipeline(
        settings=live_settings,
        http_client=http_client,
        llm_service=mock_llm_service,
    ) as pipeline:
        report = await pipeline.run("B01DFKC2SO", "amazon.com")

    assert report.target_product.price == 189.5
    assert [c.identifier for c in report.competitors] == ["B0LIVE0001", "B0LIVE0002"]
    assert report.market_insights.average_price == 79.99
    assert report.market_insights.top_keywords[0] == "wireless"
    assert report.ai_insights == "1. Market Position: strong."
    assert report.degraded is False
    assert all(o.source == DataSource.LIVE for o in report.data_sources.values())

    # Injected clients stay open
    assert not http_client.is_closed
    mock_llm_service.close.assert_not_awaited()
    await http_client.aclose()


@pytest.mark.asyncio
async def test_pipeline_rejects_bad_input(settings):
    async with BenchmarkPipeline(settings=settings) as pipeline:
        with pytest.raises(MissingIdentifierError):
            await pipeline.run("")
        with pytest.raises(InvalidIdentifierError):
            await pipeline.run("B01-DFKC2S")
        with pytest.raises(UnsupportedMarketplaceError):
            await pipeline.run("B01DFKC2SO", "amazon.example")


@pytest.mark.asyncio
async def test_empty_competitor_set_fails_run(settings):
    empty_table = MappingProxyType({"default": ()})
    async with BenchmarkPipeline(settings=settings, competitor_table=empty_table) as pipeline:
        with pytest.raises(EmptyCompetitorSetError):
            await pipeline.run("B01DFKC2SO")


@pytest.mark.asyncio
async def test_unexpected_error_is_wrapped(settings):
    with patch("product_optimizer.pipeline.orchestrator.aggregate", side_effect=RuntimeError("boom")):
        async with BenchmarkPipeline(settings=settings) as pipeline:
            with pytest.raises(PipelineError):
                await pipeline.run("B01DFKC2SO")
