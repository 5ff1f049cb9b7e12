import httpx
import pytest
from conftest import SP_API_BASE, make_transport

from product_optimizer.config.resolver import build_resolver_config
from product_optimizer.data.fallback_tables import PRODUCT_TABLE
from product_optimizer.services.sp_api_client import AmazonTokenProvider, SellingPartnerClient
from product_optimizer.utils.errors import MissingCredentialsError, UpstreamUnavailableError


def make_client(settings, transport):
    config = build_resolver_config(settings, PRODUCT_TABLE)
    return SellingPartnerClient(config, httpx.AsyncClient(transport=transport))


@pytest.mark.asyncio
async def test_missing_credentials_short_circuits(settings):
    calls = []
    client = make_client(settings, make_transport(calls=calls))

    with pytest.raises(MissingCredentialsError):
        await client.get_item("B01DFKC2SO")
    assert calls == []


@pytest.mark.asyncio
async def test_get_item_sends_token_headers(live_settings, catalog_item):
    calls = []
    client = make_client(live_settings, make_transport(item=catalog_item, calls=calls))

    data = await client.get_item("B01DFKC2SO")

    assert data["asin"] == "B01DFKC2SO"
    token_request, item_request = calls
    assert b"grant_type=refresh_token" in token_request.content
    assert b"refresh_token=refresh-token" in token_request.content
    assert str(item_request.url) == f"{SP_API_BASE}/products/v0/items/B01DFKC2SO"
    assert item_request.headers["Authorization"] == "Bearer access-token"
    assert item_request.headers["x-amz-access-token"] == "access-token"


@pytest.mark.asyncio
async def test_search_catalog_passes_marketplace(live_settings, catalog_items):
    calls = []
    client = make_client(live_settings, make_transport(items=catalog_items, calls=calls))

    items = await client.search_catalog("electronics")

    assert [i["asin"] for i in items] == ["B01DFKC2SO", "B0LIVE0001", "B0LIVE0002"]
    params = calls[-1].url.params
    assert params["keywords"] == "electronics"
    assert params["marketplaceIds"] == "ATVPDKIKX0DER"


@pytest.mark.asyncio
async def test_non_2xx_is_upstream_unavailable(live_settings):
    client = make_client(live_settings, make_transport(item_status=503))

    with pytest.raises(UpstreamUnavailableError) as exc:
        await client.get_item("B01DFKC2SO")
    assert exc.value.status_code == 503


@pytest.mark.asyncio
async def test_token_failure_is_upstream_unavailable(live_settings):
    client = make_client(live_settings, make_transport(token_status=401))

    with pytest.raises(UpstreamUnavailableError) as exc:
        await client.search_catalog("electronics")
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_transport_error_is_upstream_unavailable(live_settings):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(live_settings, httpx.MockTransport(handler))

    with pytest.raises(UpstreamUnavailableError):
        await client.get_item("B01DFKC2SO")


@pytest.mark.asyncio
async def test_token_response_without_access_token(live_settings):
    def handler(request):
        return httpx.Response(200, json={"token_type": "bearer"})

    config = build_resolver_config(live_settings, PRODUCT_TABLE)
    provider = AmazonTokenProvider(config.credentials, httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    with pytest.raises(UpstreamUnavailableError):
        await provider.get_access_token()


@pytest.mark.asyncio
async def test_owned_client_is_closed(settings):
    config = build_resolver_config(settings, PRODUCT_TABLE)
    async with SellingPartnerClient(config) as client:
        inner = client._client
    assert inner.is_closed


@pytest.mark.asyncio
async def test_redirect_is_upstream_unavailable(live_settings):
    client = make_client(live_settings, make_transport(item={"title": "Moved"}, item_status=302))

    with pytest.raises(UpstreamUnavailableError) as exc:
        await client.get_item("B01DFKC2SO")
    assert exc.value.status_code == 302


@pytest.mark.asyncio
async def test_token_redirect_is_upstream_unavailable(live_settings):
    calls = []
    client = make_client(live_settings, make_transport(token_status=307, calls=calls))

    with pytest.raises(UpstreamUnavailableError) as exc:
        await client.search_catalog("electronics")
    assert exc.value.status_code == 307
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_catalog_timeout_is_upstream_unavailable(live_settings):
    calls = []
    transport = make_transport(calls=calls, fail_path="/catalog/v0/items", fail_with=httpx.ReadTimeout)
    client = make_client(live_settings, transport)

    with pytest.raises(UpstreamUnavailableError):
        await client.search_catalog("electronics")
    assert [r.url.path for r in calls] == ["/o2/token", "/catalog/v0/items"]
