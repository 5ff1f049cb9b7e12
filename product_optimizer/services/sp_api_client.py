"""
Selling Partner API client.

Thin async wrapper around the two catalog endpoints the pipeline reads and
the Login-with-Amazon refresh-token grant that authorizes them. Each method
makes exactly one HTTP attempt; every failure surfaces as
MissingCredentialsError or UpstreamUnavailableError so resolvers can fall
back without catching broad exceptions.

Example:
    >>> async with SellingPartnerClient(config) as client:
    ...     item = await client.get_item("B01DFKC2SO")
    ...     items = await client.search_catalog("electronics")
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from product_optimizer.config.resolver import AmazonCredentials, ResolverConfig
from product_optimizer.utils.errors import MissingCredentialsError, UpstreamUnavailableError
from product_optimizer.utils.logger import get_logger

logger = get_logger(__name__)


class AmazonTokenProvider:
    """Exchanges a refresh token for a short-lived access token."""

    def __init__(self, credentials: Optional[AmazonCredentials], client: httpx.AsyncClient):
        self.credentials = credentials
        self._client = client

    async def get_access_token(self) -> str:
        """
        Run the refresh-token grant once.

        Raises:
            MissingCredentialsError: If no credentials are configured
            UpstreamUnavailableError: If the token endpoint fails
        """
        if self.credentials is None:
            raise MissingCredentialsError("Missing Amazon API credentials")

        form = {
            "grant_type": "refresh_token",
            "refresh_token": self.credentials.refresh_token.get_secret_value(),
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret.get_secret_value(),
        }
        try:
            response = await self._client.post(
                self.credentials.token_url,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"Token request failed: {type(e).__name__}") from e

        if not response.is_success:
            raise UpstreamUnavailableError(
                f"Token endpoint returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamUnavailableError("Token endpoint returned invalid JSON") from e
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise UpstreamUnavailableError("Token endpoint response had no access_token")
        return token


class SellingPartnerClient:
    """
    Catalog lookups against the Selling Partner API.

    Attributes:
        config: Resolver configuration (base URL, credentials, marketplace)
        token_provider: Refresh-token grant helper
    """

    def __init__(
        self,
        config: ResolverConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_seconds),
        )
        self.token_provider = AmazonTokenProvider(config.credentials, self._client)

    async def __aenter__(self) -> "SellingPartnerClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def _auth_headers(token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "x-amz-access-token": token,
            "Content-Type": "application/json",
        }

    async def _get_json(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        token = await self.token_provider.get_access_token()
        url = f"{self.config.base_url}{path}"
        try:
            response = await self._client.get(url, params=params, headers=self._auth_headers(token))
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"Request to {path} failed: {type(e).__name__}") from e

        if not response.is_success:
            raise UpstreamUnavailableError(
                f"Selling Partner API returned {response.status_code}",
                status_code=response.status_code,
                details={"path": path},
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailableError(f"Invalid JSON from {path}") from e

    async def get_item(self, identifier: str) -> dict[str, Any]:
        """Fetch one catalog item by ASIN."""
        data = await self._get_json(f"/products/v0/items/{identifier}")
        if not isinstance(data, dict):
            raise UpstreamUnavailableError("Item response was not an object")
        logger.debug("Catalog item fetched", identifier=identifier)
        return data

    async def search_catalog(self, keywords: str) -> list[dict[str, Any]]:
        """Search the catalog by keywords within the configured marketplace."""
        data = await self._get_json(
            "/catalog/v0/items",
            params={"keywords": keywords, "marketplaceIds": self.config.marketplace_id},
        )
        items = data.get("items") if isinstance(data, dict) else None
        if items is None:
            return []
        if not isinstance(items, list):
            raise UpstreamUnavailableError("Catalog search items was not a list")
        logger.debug("Catalog search completed", keywords=keywords, results_count=len(items))
        return [item for item in items if isinstance(item, dict)]
