"""
Explicit per-resolver configuration.

Resolvers never read the environment themselves; they receive a
ResolverConfig built from Settings when they are constructed.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pydantic import SecretStr

from product_optimizer.config.settings import Settings


# Selling Partner marketplace ids by storefront domain
MARKETPLACE_IDS: dict[str, str] = {
    "amazon.com": "ATVPDKIKX0DER",
    "amazon.ca": "A2EUQ1WTGCTBG2",
    "amazon.com.mx": "A1AM78C64UM0Y8",
    "amazon.co.uk": "A1F83G8C2ARO7P",
    "amazon.de": "A1PA6795UKMFR9",
    "amazon.fr": "A13V1IB3VIYZZH",
    "amazon.it": "APJ6JRA9NG5V4",
    "amazon.es": "A1RKKUPIHCS9HS",
    "amazon.co.jp": "A1VC38T7YXB528",
}


@dataclass(frozen=True)
class AmazonCredentials:
    """Login-with-Amazon client credentials and refresh token."""
    client_id: str
    client_secret: SecretStr
    refresh_token: SecretStr
    token_url: str = "https://api.amazon.com/auth/o2/token"

    def __repr__(self) -> str:
        return f"AmazonCredentials(client_id={self.client_id!r}, token_url={self.token_url!r})"


@dataclass(frozen=True)
class ResolverConfig:
    """
    Everything a resolver needs to attempt a live call or fall back.

    Attributes:
        base_url: Selling Partner API base URL
        credentials: Refresh-token credentials, None disables the live path
        fallback_table: Immutable lookup table used when the live path fails
        marketplace_id: Selling Partner marketplace id for catalog searches
        timeout_seconds: Per-request HTTP timeout
    """
    base_url: str
    credentials: Optional[AmazonCredentials]
    fallback_table: Mapping[str, Any]
    marketplace_id: str = MARKETPLACE_IDS["amazon.com"]
    timeout_seconds: float = 30.0


def credentials_from_settings(settings: Settings) -> Optional[AmazonCredentials]:
    """Build AmazonCredentials, or None when any part is missing."""
    if not settings.has_amazon_credentials:
        return None
    return AmazonCredentials(
        client_id=settings.amazon_client_id,
        client_secret=settings.amazon_client_secret,
        refresh_token=settings.amazon_refresh_token,
        token_url=settings.amazon_token_url,
    )


def build_resolver_config(
    settings: Settings,
    fallback_table: Mapping[str, Any],
    marketplace: Optional[str] = None,
) -> ResolverConfig:
    """
    Create a ResolverConfig for one resolver.

    Args:
        settings: Application settings
        fallback_table: Static table the resolver falls back to
        marketplace: Storefront domain (defaults to settings.default_marketplace)
    """
    marketplace = marketplace or settings.default_marketplace
    return ResolverConfig(
        base_url=settings.sp_api_base_url,
        credentials=credentials_from_settings(settings),
        fallback_table=fallback_table,
        marketplace_id=MARKETPLACE_IDS.get(marketplace, MARKETPLACE_IDS["amazon.com"]),
        timeout_seconds=settings.request_timeout_seconds,
    )
