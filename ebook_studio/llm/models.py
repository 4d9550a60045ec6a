"""Generation request/response models.

Vendor-neutral shapes for the text-generation service. Provider adapters
translate these to and from their SDK's wire format.
"""

from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A single conversation message."""

    role: Literal["user", "assistant"]
    content: str


class GenerationRequest(BaseModel):
    """Vendor-neutral generation request."""

    model: str
    max_output_tokens: int = Field(gt=0)
    system_instructions: str
    messages: list[ChatMessage]
    temperature: float | None = Field(default=None, ge=0.0, le=1.0)


class Usage(BaseModel):
    """Token usage reported by the service."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class GenerationResponse(BaseModel):
    """Vendor-neutral generation response."""

    text: str
    usage: Usage | None = None
    model: str
    provider: str
    finish_reason: str | None = None
    latency_ms: int = 0
    request_id: str | None = None

    @property
    def tokens_used(self) -> int | None:
        """Input plus output tokens, when the service reported them."""
        if self.usage is None:
            return None
        return self.usage.total_tokens
