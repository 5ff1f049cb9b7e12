"""
Claude API service for narrative generation.

Wraps Anthropic's async client with token accounting and a single-attempt
call policy: the SDK's own retries are disabled and every API or transport
failure is raised as LLMServiceError so the insight stage can fall back to
its template.

Example:
    >>> async with ClaudeService(settings) as service:
    ...     text = await service.generate_text(prompt, system=SYSTEM_PROMPT)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import anthropic
from anthropic import APIError, APIStatusError

from product_optimizer.config.settings import Settings, get_settings
from product_optimizer.utils.errors import LLMServiceError, MissingCredentialsError
from product_optimizer.utils.logger import get_logger

logger = get_logger(__name__)


# Token costs per model (per 1K tokens)
TOKEN_COSTS = {
    "claude-sonnet-4-20250514": {"input": 0.003, "output": 0.015},
    "claude-3-5-sonnet-20241022": {"input": 0.003, "output": 0.015},
    "claude-3-5-haiku-20241022": {"input": 0.0008, "output": 0.004},
    "claude-3-haiku-20240307": {"input": 0.00025, "output": 0.00125},
}


@dataclass
class TokenUsage:
    """Token usage tracking for a single request."""
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    estimated_cost: float = 0.0
    model: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def calculate_cost(self, model: str) -> float:
        """Calculate estimated cost based on token usage."""
        if model in TOKEN_COSTS:
            costs = TOKEN_COSTS[model]
            input_cost = (self.input_tokens / 1000) * costs["input"]
            output_cost = (self.output_tokens / 1000) * costs["output"]
            self.estimated_cost = input_cost + output_cost
        return self.estimated_cost


class ClaudeService:
    """
    Claude client used by the insight generator.

    Attributes:
        settings: Application settings
        client: Anthropic async client
        token_usage_history: Usage records for calls made by this instance
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        api_key: Optional[str] = None,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ):
        """
        Initialize the Claude service.

        Args:
            settings: Application settings instance
            api_key: Override API key (uses settings if not provided)
            client: Pre-built Anthropic client, mainly for tests

        Raises:
            MissingCredentialsError: If no API key is available
        """
        self.settings = settings or get_settings()
        if api_key is None and self.settings.anthropic_api_key is not None:
            api_key = self.settings.anthropic_api_key.get_secret_value()
        if not api_key and client is None:
            raise MissingCredentialsError("Anthropic API key not configured")

        self.client = client or anthropic.AsyncAnthropic(
            api_key=api_key,
            max_retries=0,
            timeout=self.settings.request_timeout_seconds,
        )
        self.token_usage_history: list[TokenUsage] = []
        self.total_cost: float = 0.0

    async def __aenter__(self) -> "ClaudeService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the client connection."""
        await self.client.close()

    async def generate_text(
        self,
        prompt: str,
        system: str = "",
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Send one user message and return the concatenated text blocks.

        Raises:
            LLMServiceError: On any API/transport failure or an empty reply
        """
        model = self.settings.claude_model
        try:
            response = await self.client.messages.create(
                model=model,
                max_tokens=max_tokens or self.settings.insight_max_tokens,
                temperature=self.settings.insight_temperature if temperature is None else temperature,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except APIStatusError as e:
            raise LLMServiceError(
                f"Claude API returned {e.status_code}",
                status_code=e.status_code,
            ) from e
        except APIError as e:
            raise LLMServiceError(f"Claude API call failed: {type(e).__name__}") from e

        text = "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        ).strip()
        self._record_usage(response, model)

        if not text:
            raise LLMServiceError("Claude returned an empty response")
        return text

    def _record_usage(self, response: Any, model: str) -> None:
        usage_data = getattr(response, "usage", None)
        if usage_data is None:
            return
        usage = TokenUsage(
            input_tokens=usage_data.input_tokens,
            output_tokens=usage_data.output_tokens,
            total_tokens=usage_data.input_tokens + usage_data.output_tokens,
            model=model,
        )
        usage.calculate_cost(model)
        self.token_usage_history.append(usage)
        self.total_cost += usage.estimated_cost
        logger.info(
            "Claude call completed",
            model=model,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            cost=f"${usage.estimated_cost:.4f}",
        )

    def get_usage_stats(self) -> dict[str, Any]:
        """Aggregate usage for this instance."""
        return {
            "total_requests": len(self.token_usage_history),
            "total_tokens": sum(u.total_tokens for u in self.token_usage_history),
            "total_cost": round(self.total_cost, 6),
        }
