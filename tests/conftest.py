import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import structlog

from product_optimizer.config.settings import Settings, get_settings
from product_optimizer.models.schemas import (
    CompetitorRecord,
    MarketInsights,
    MarketSummary,
    PriceHistory,
    PriceRange,
    ProductRecord,
)

ENV_KEYS = [
    "AMAZON_CLIENT_ID",
    "AMAZON_CLIENT_SECRET",
    "AMAZON_REFRESH_TOKEN",
    "AMAZON_TOKEN_URL",
    "SP_API_BASE_URL",
    "DEFAULT_MARKETPLACE",
    "ANTHROPIC_API_KEY",
    "CLAUDE_MODEL",
    "LOG_LEVEL",
    "LOG_JSON",
]

SP_API_BASE = "https://sp.test"
TOKEN_URL = "https://auth.test/o2/token"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate tests from the developer's environment and cached settings."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


@pytest.fixture
def settings():
    """Settings with no credentials: every stage falls back."""
    return Settings(_env_file=None)


@pytest.fixture
def live_settings():
    """Settings with Amazon credentials pointing at the mock endpoints."""
    return Settings(
        _env_file=None,
        AMAZON_CLIENT_ID="client-id",
        AMAZON_CLIENT_SECRET="client-secret",
        AMAZON_REFRESH_TOKEN="refresh-token",
        AMAZON_TOKEN_URL=TOKEN_URL,
        SP_API_BASE_URL=SP_API_BASE,
    )


def make_transport(item=None, items=None, token_status=200, item_status=200, search_status=200,
                   calls=None, fail_path=None, fail_with=httpx.ConnectError):
    """
    MockTransport emulating the token endpoint and both catalog endpoints.

    Every request is appended to ``calls`` when a list is given. Requests whose
    path starts with ``fail_path`` raise ``fail_with`` instead of answering.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        path = request.url.path
        if fail_path is not None and path.startswith(fail_path):
            raise fail_with("simulated transport failure", request=request)
        if path == "/o2/token":
            if token_status != 200:
                return httpx.Response(token_status, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": "access-token", "expires_in": 3600})
        if path.startswith("/products/v0/items/"):
            return httpx.Response(item_status, json=item if item is not None else {})
        if path == "/catalog/v0/items":
            return httpx.Response(search_status, json={"items": items if items is not None else []})
        return httpx.Response(404, json={"error": "not found"})

    return httpx.MockTransport(handler)


@pytest.fixture
def catalog_item():
    return {
        "asin": "B01DFKC2SO",
        "item": {"title": "Studio Wireless Headphones with Noise Cancelling"},
        "price": {"amount": "189.50"},
        "rating": 4.6,
        "reviewCount": 1200,
        "browseNodeId": "electronics",
        "browseNodeName": "Electronics",
        "keywords": ["wireless", "studio", "noise-cancelling", "bluetooth", "extra"],
    }


@pytest.fixture
def catalog_items():
    return [
        {
            "asin": "B01DFKC2SO",
            "title": "Target product itself",
            "price": {"amount": 199.99},
        },
        {
            "asin": "B0LIVE0001",
            "title": "Compact Wireless Earbuds",
            "price": {"amount": 59.99},
            "rating": 4.1,
            "reviewCount": 800,
            "keywords": ["wireless", "compact"],
        },
        {
            "asin": "B0LIVE0002",
            "title": "Wireless Gaming Headset",
            "price": {"amount": 99.99},
            "rating": 4.4,
            "reviewCount": 450,
            "keywords": ["gaming", "wireless"],
        },
    ]


def make_competitor(identifier, price, rating, sales, keywords, share=10.0):
    return CompetitorRecord(
        identifier=identifier,
        title=f"Competitor {identifier}",
        price=price,
        rating=rating,
        review_count=100,
        category_id="electronics",
        category_name="Electronics",
        keywords=tuple(keywords),
        price_history=PriceHistory(min=round(price * 0.9, 2), max=round(price * 1.1, 2)),
        estimated_sales=sales,
        market_share=share,
    )


@pytest.fixture
def sample_product():
    return ProductRecord(
        identifier="B0TARGET01",
        title="Test Wireless Speaker",
        price=120.0,
        rating=4.4,
        review_count=640,
        category_id="electronics",
        category_name="Electronics",
        keywords=("wireless", "portable"),
        price_history=PriceHistory(min=108.0, max=132.0),
        ranking_info={"Electronics": 40},
        estimated_sales=2000,
        market_share=12.0,
    )


@pytest.fixture
def sample_competitors():
    return [
        make_competitor("B0COMP0001", 100.0, 4.0, 1000, ["wireless", "bass"]),
        make_competitor("B0COMP0002", 150.0, 4.5, 2000, ["portable", "wireless"]),
        make_competitor("B0COMP0003", 80.0, 4.2, 500, ["bass", "budget"]),
    ]


@pytest.fixture
def sample_summary(sample_product, sample_competitors):
    return MarketSummary(
        category="Electronics",
        target_product=sample_product,
        competitors=tuple(sample_competitors),
        market_insights=MarketInsights(
            total_market_size=3500,
            average_price=110.0,
            average_rating=4.23,
            price_range=PriceRange(min=80.0, max=150.0),
            top_keywords=("wireless", "bass", "portable", "budget"),
        ),
    )


@pytest.fixture
def mock_llm_service():
    service = MagicMock()
    service.generate_text = AsyncMock(return_value="1. Market Position: strong.")
    service.close = AsyncMock()
    return service


def parse_json_output(text: str) -> dict:
    """Parse the JSON document printed by the CLI."""
    return json.loads(text[text.index("{"):])
