"""
Integration tests for the HTTP API using FastAPI's TestClient.
"""

from types import MappingProxyType

import pytest
from fastapi.testclient import TestClient

from product_optimizer.api.app import create_app, get_pipeline_factory
from product_optimizer.config.settings import get_settings
from product_optimizer.pipeline.orchestrator import BenchmarkPipeline

GENERIC = "Failed to process benchmarking request."


@pytest.fixture
def app(settings):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_benchmark_success(client):
    response = client.post("/api/benchmarking", json={"asin": "B01DFKC2SO"})

    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "Electronics"
    assert data["target_product"]["title"] == "Premium Wireless Headphones"
    assert data["market_insights"]["average_price"] == 159.99
    assert data["market_insights"]["price_range"] == {"min": 79.99, "max": 249.99}
    assert len(data["competitors"]) == 3
    assert data["ai_insights"]
    assert data["timestamp"].endswith("Z")
    assert data["data_sources"]["product"]["source"] == "fallback"


def test_identifier_key_is_accepted(client):
    response = client.post("/api/benchmarking", json={"identifier": "b07x2lsdm3", "marketplace": "amazon.com"})
    assert response.status_code == 200
    assert response.json()["category"] == "Home & Kitchen"


@pytest.mark.parametrize("body, message", [
    ({}, "Identifier is required."),
    ({"asin": "   "}, "Identifier is required."),
    ({"asin": "NOT-VALID!"}, "Invalid identifier format."),
    ({"asin": 12345}, "Invalid identifier format."),
    ({"asin": "B01DFKC2SO", "marketplace": 5}, "Unsupported marketplace."),
    ({"asin": "B01DFKC2SO", "marketplace": "ebay.com"}, "Unsupported marketplace."),
])
def test_bad_requests(client, body, message):
    response = client.post("/api/benchmarking", json=body)
    assert response.status_code == 400
    assert response.json()["error"] == message


def test_non_json_body(client):
    response = client.post("/api/benchmarking", content=b"not json", headers={"Content-Type": "text/plain"})
    assert response.status_code == 400
    assert response.json()["error"] == "Identifier is required."


def test_empty_competitor_set_is_500(app, client):
    empty_table = MappingProxyType({"default": ()})
    app.dependency_overrides[get_pipeline_factory] = lambda: (
        lambda settings: BenchmarkPipeline(settings=settings, competitor_table=empty_table)
    )

    response = client.post("/api/benchmarking", json={"asin": "B01DFKC2SO"})

    assert response.status_code == 500
    assert response.json()["error"] == GENERIC


def test_unexpected_error_is_500(app, client):
    class ExplodingPipeline:
        def __init__(self, settings):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return False

        async def run(self, identifier, marketplace=None):
            raise RuntimeError("secret upstream detail")

    app.dependency_overrides[get_pipeline_factory] = lambda: ExplodingPipeline

    response = client.post("/api/benchmarking", json={"asin": "B01DFKC2SO"})

    assert response.status_code == 500
    assert response.json()["error"] == GENERIC
    assert "secret" not in response.text
