"""Anthropic provider implementation.

Implements the GenerationProvider interface for Anthropic's Messages API.
"""

import time
from typing import Any

from anthropic import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncAnthropic,
)

from ..errors import AuthenticationFailure, EmptyOutputFailure, TimeoutFailure, TransportFailure
from ..models import GenerationRequest, GenerationResponse, Usage
from .base import GenerationProvider


class AnthropicProvider(GenerationProvider):
    """Anthropic Messages API provider."""

    def __init__(
        self,
        api_key: str | None,
        timeout: float = 120.0,
        base_url: str | None = None,
        client: AsyncAnthropic | None = None,
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key.
            timeout: Per-call timeout in seconds.
            base_url: Optional endpoint override.
            client: Pre-built SDK client (tests).
        """
        self._api_key = api_key
        self._timeout = timeout
        self._base_url = base_url
        self._client = client

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def client(self) -> AsyncAnthropic:
        """Lazy-initialized Anthropic client with SDK retries disabled."""
        if self._client is None:
            if not self._api_key:
                raise AuthenticationFailure(
                    "Anthropic API key not configured. Set ANTHROPIC_API_KEY environment variable.",
                    provider=self.name,
                )
            kwargs: dict[str, Any] = {
                "api_key": self._api_key,
                "timeout": self._timeout,
                "max_retries": 0,
            }
            if self._base_url:
                kwargs["base_url"] = self._base_url
            self._client = AsyncAnthropic(**kwargs)
        return self._client

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Send a Messages API request."""
        start_time = time.perf_counter()
        payload = self._build_request(request)

        try:
            response = await self.client.messages.create(**payload)
        except APITimeoutError as e:
            raise TimeoutFailure(
                f"Anthropic request timed out after {self._timeout}s",
                provider=self.name,
            ) from e
        except APIConnectionError as e:
            raise TransportFailure(
                f"Failed to connect to Anthropic: {e}",
                provider=self.name,
            ) from e
        except APIStatusError as e:
            raise self._map_status_error(e) from e

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        return self._parse_response(response, latency_ms, request)

    def _build_request(self, request: GenerationRequest) -> dict[str, Any]:
        """Convert GenerationRequest to Messages API format."""
        payload: dict[str, Any] = {
            "model": request.model,
            "max_tokens": request.max_output_tokens,
            "system": request.system_instructions,
            "messages": [
                {"role": msg.role, "content": msg.content}
                for msg in request.messages
            ],
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        return payload

    def _parse_response(
        self, response: Any, latency_ms: int, request: GenerationRequest
    ) -> GenerationResponse:
        """Convert a Messages API response to GenerationResponse."""
        text = "".join(
            block.text
            for block in (response.content or [])
            if getattr(block, "type", None) == "text" and block.text
        )
        request_id = getattr(response, "id", None)

        if not text.strip():
            raise EmptyOutputFailure(
                "Anthropic returned no text content",
                provider=self.name,
                request_id=request_id,
            )

        usage = None
        if getattr(response, "usage", None) is not None:
            usage = Usage(
                input_tokens=response.usage.input_tokens or 0,
                output_tokens=response.usage.output_tokens or 0,
            )

        return GenerationResponse(
            text=text,
            usage=usage,
            model=getattr(response, "model", None) or request.model,
            provider=self.name,
            finish_reason=getattr(response, "stop_reason", None),
            latency_ms=latency_ms,
            request_id=request_id,
        )
