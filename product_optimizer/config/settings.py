"""
Application settings and configuration management.

This module handles all environment variables, API keys, and application
configuration using Pydantic settings management for type safety and validation.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All sensitive values are stored as SecretStr to prevent accidental logging.
    Every credential is optional: a missing key only disables the live path
    of the stage that needs it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Login with Amazon (refresh-token grant)
    amazon_client_id: Optional[str] = Field(default=None, alias="AMAZON_CLIENT_ID")
    amazon_client_secret: Optional[SecretStr] = Field(default=None, alias="AMAZON_CLIENT_SECRET")
    amazon_refresh_token: Optional[SecretStr] = Field(default=None, alias="AMAZON_REFRESH_TOKEN")
    amazon_token_url: str = Field(
        default="https://api.amazon.com/auth/o2/token",
        alias="AMAZON_TOKEN_URL",
    )

    # Selling Partner API
    sp_api_base_url: str = Field(
        default="https://sandbox.sellingpartnerapi-na.amazon.com",
        alias="SP_API_BASE_URL",
    )
    default_marketplace: str = Field(default="amazon.com", alias="DEFAULT_MARKETPLACE")

    # Narrative generation
    anthropic_api_key: Optional[SecretStr] = Field(default=None, alias="ANTHROPIC_API_KEY")
    claude_model: str = Field(
        default="claude-sonnet-4-20250514",
        alias="CLAUDE_MODEL"
    )
    insight_max_tokens: int = Field(default=1500, alias="INSIGHT_MAX_TOKENS")
    insight_temperature: float = Field(default=0.7, alias="INSIGHT_TEMPERATURE")

    # Application Configuration
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        alias="APP_ENV"
    )
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="LOG_LEVEL"
    )
    log_json: bool = Field(default=True, alias="LOG_JSON")

    request_timeout_seconds: float = Field(default=30.0, alias="REQUEST_TIMEOUT_SECONDS")

    @field_validator("sp_api_base_url", "amazon_token_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize endpoint URLs so paths can be appended."""
        return v.rstrip("/")

    @field_validator("amazon_client_secret", "amazon_refresh_token", "anthropic_api_key", mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty environment values as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def has_amazon_credentials(self) -> bool:
        """Whether the refresh-token grant can be attempted."""
        return bool(
            self.amazon_client_id
            and self.amazon_client_secret
            and self.amazon_refresh_token
        )

    @property
    def has_llm_credentials(self) -> bool:
        """Whether narrative generation can call Claude."""
        return self.anthropic_api_key is not None

    def get_data_source(self) -> str:
        """Describe which live sources are enabled."""
        sources = []
        if self.has_amazon_credentials:
            sources.append("sp-api")
        if self.has_llm_credentials:
            sources.append("claude")
        return "+".join(sources) if sources else "fallback"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
