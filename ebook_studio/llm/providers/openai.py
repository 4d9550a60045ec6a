"""OpenAI provider implementation.

Implements the GenerationProvider interface for OpenAI's Chat Completions API.
The system instructions travel as a leading system-role message.
"""

import time
from typing import Any

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from ..errors import AuthenticationFailure, EmptyOutputFailure, TimeoutFailure, TransportFailure
from ..models import GenerationRequest, GenerationResponse, Usage
from .base import GenerationProvider


class OpenAIProvider(GenerationProvider):
    """OpenAI Chat Completions API provider."""

    def __init__(
        self,
        api_key: str | None,
        timeout: float = 120.0,
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
    ):
        self._api_key = api_key
        self._timeout = timeout
        self._base_url = base_url
        self._client = client

    @property
    def name(self) -> str:
        return "openai"

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy-initialized OpenAI client with SDK retries disabled."""
        if self._client is None:
            if not self._api_key:
                raise AuthenticationFailure(
                    "OpenAI API key not configured. Set OPENAI_API_KEY environment variable.",
                    provider=self.name,
                )
            kwargs: dict[str, Any] = {
                "api_key": self._api_key,
                "timeout": self._timeout,
                "max_retries": 0,
            }
            if self._base_url:
                kwargs["base_url"] = self._base_url
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Send a Chat Completions request."""
        start_time = time.perf_counter()
        payload = self._build_request(request)

        try:
            response = await self.client.chat.completions.create(**payload)
        except APITimeoutError as e:
            raise TimeoutFailure(
                f"OpenAI request timed out after {self._timeout}s",
                provider=self.name,
            ) from e
        except APIConnectionError as e:
            raise TransportFailure(
                f"Failed to connect to OpenAI: {e}",
                provider=self.name,
            ) from e
        except APIStatusError as e:
            raise self._map_status_error(e) from e

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        return self._parse_response(response, latency_ms, request)

    def _build_request(self, request: GenerationRequest) -> dict[str, Any]:
        """Convert GenerationRequest to Chat Completions format."""
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": request.system_instructions}
        ]
        messages.extend(
            {"role": msg.role, "content": msg.content} for msg in request.messages
        )

        payload: dict[str, Any] = {
            "model": request.model,
            "messages": messages,
            "max_tokens": request.max_output_tokens,
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        return payload

    def _parse_response(
        self, response: Any, latency_ms: int, request: GenerationRequest
    ) -> GenerationResponse:
        """Convert a Chat Completions response to GenerationResponse."""
        request_id = getattr(response, "id", None)
        choices = getattr(response, "choices", None) or []
        text = choices[0].message.content if choices else None

        if not text or not text.strip():
            raise EmptyOutputFailure(
                "OpenAI returned no text content",
                provider=self.name,
                request_id=request_id,
            )

        usage = None
        if getattr(response, "usage", None) is not None:
            usage = Usage(
                input_tokens=response.usage.prompt_tokens or 0,
                output_tokens=response.usage.completion_tokens or 0,
            )

        return GenerationResponse(
            text=text,
            usage=usage,
            model=getattr(response, "model", None) or request.model,
            provider=self.name,
            finish_reason=choices[0].finish_reason,
            latency_ms=latency_ms,
            request_id=request_id,
        )
