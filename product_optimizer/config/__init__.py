"""Configuration module for the Product Optimizer."""

from product_optimizer.config.settings import Settings, get_settings
from product_optimizer.config.resolver import (
    MARKETPLACE_IDS,
    AmazonCredentials,
    ResolverConfig,
    build_resolver_config,
    credentials_from_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "MARKETPLACE_IDS",
    "AmazonCredentials",
    "ResolverConfig",
    "build_resolver_config",
    "credentials_from_settings",
]
