"""Generation client.

Thin wrapper around a single text-generation provider. Configuration is
passed in explicitly; only ``GenerationConfig.from_env`` reads process state,
and only the application boundary calls it.

The client does not retry. Blueprint synthesis is safe to retry as a whole,
chapter generation after a saved write is not, so the decision belongs to
the caller.
"""

import logging
import os
import uuid
from typing import Literal

from pydantic import BaseModel, Field

from .errors import GenerationError
from .models import ChatMessage, GenerationRequest, GenerationResponse
from .providers.anthropic import AnthropicProvider
from .providers.base import GenerationProvider
from .providers.openai import OpenAIProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "claude-sonnet-4-20250514"
DEFAULT_TIMEOUT_SECONDS = 120.0


class GenerationConfig(BaseModel):
    """Explicit configuration for the generation client."""

    provider: Literal["anthropic", "openai"] = "anthropic"
    model_id: str = DEFAULT_MODEL_ID
    api_key: str | None = None
    base_url: str | None = None
    default_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    @classmethod
    def from_env(cls) -> "GenerationConfig":
        """Build configuration from environment variables.

        Env vars:
        - LLM_PROVIDER: "anthropic" (default) or "openai"
        - LLM_MODEL_ID: Model identifier
        - ANTHROPIC_API_KEY / OPENAI_API_KEY: Credentials for the provider
        - LLM_BASE_URL: Optional endpoint override
        - LLM_TIMEOUT_SECONDS: Per-call timeout
        """
        provider = os.environ.get("LLM_PROVIDER", "anthropic").lower()
        key_var = "OPENAI_API_KEY" if provider == "openai" else "ANTHROPIC_API_KEY"
        return cls(
            provider=provider,
            model_id=os.environ.get("LLM_MODEL_ID", DEFAULT_MODEL_ID),
            api_key=os.environ.get(key_var),
            base_url=os.environ.get("LLM_BASE_URL") or None,
            default_timeout=float(
                os.environ.get("LLM_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
            ),
        )


def build_provider(config: GenerationConfig) -> GenerationProvider:
    """Create the provider adapter named by the configuration."""
    if config.provider == "openai":
        return OpenAIProvider(
            api_key=config.api_key,
            timeout=config.default_timeout,
            base_url=config.base_url,
        )
    return AnthropicProvider(
        api_key=config.api_key,
        timeout=config.default_timeout,
        base_url=config.base_url,
    )


class GenerationClient:
    """Single-capability client: instructions in, raw text out."""

    def __init__(
        self,
        config: GenerationConfig,
        provider: GenerationProvider | None = None,
    ):
        """Initialize the client.

        Args:
            config: Model, credentials, endpoint and timeout.
            provider: Pre-built provider (tests); built from config otherwise.
        """
        self._config = config
        self._provider = provider or build_provider(config)

    @property
    def model_id(self) -> str:
        return self._config.model_id

    @property
    def provider_name(self) -> str:
        return self._provider.name

    async def generate(
        self,
        system_instructions: str,
        user_message: str,
        max_output_tokens: int,
        correlation_id: str | None = None,
    ) -> GenerationResponse:
        """Run one generation call.

        Returns:
            The response; ``response.text`` is guaranteed non-empty.

        Raises:
            TransportFailure: Network failure or timeout.
            ServiceFailure: Non-success status; ``raw_body`` holds the error body.
            EmptyOutputFailure: Success status without usable text.
        """
        correlation_id = correlation_id or str(uuid.uuid4())
        request = GenerationRequest(
            model=self._config.model_id,
            max_output_tokens=max_output_tokens,
            system_instructions=system_instructions,
            messages=[ChatMessage(role="user", content=user_message)],
        )

        try:
            response = await self._provider.generate(request)
        except GenerationError as e:
            e.correlation_id = correlation_id
            logger.error(
                "Generation request failed: %s",
                str(e),
                extra={
                    "correlation_id": correlation_id,
                    "provider": self._provider.name,
                    "error_type": type(e).__name__,
                    "status_code": getattr(e, "status_code", None),
                    "raw_body": getattr(e, "raw_body", None),
                },
            )
            raise

        logger.info(
            "Generation request succeeded",
            extra={
                "correlation_id": correlation_id,
                "provider": response.provider,
                "model": response.model,
                "latency_ms": response.latency_ms,
                "tokens_used": response.tokens_used,
                "finish_reason": response.finish_reason,
            },
        )
        return response


_default_client: GenerationClient | None = None


def get_client() -> GenerationClient:
    """Get the process-wide client, configured from the environment."""
    global _default_client
    if _default_client is None:
        _default_client = GenerationClient(GenerationConfig.from_env())
    return _default_client


def set_client(client: GenerationClient | None) -> None:
    """Replace the process-wide client (for testing)."""
    global _default_client
    _default_client = client
