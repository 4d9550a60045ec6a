"""Text-generation service client.

Vendor-neutral interface over the Anthropic and OpenAI SDKs with a
three-way failure taxonomy (transport, service, empty output).
"""

from .client import GenerationClient, GenerationConfig, get_client, set_client
from .errors import (
    AuthenticationFailure,
    EmptyOutputFailure,
    GenerationError,
    InvalidRequestFailure,
    RateLimitFailure,
    ServiceFailure,
    TimeoutFailure,
    TransportFailure,
)
from .models import ChatMessage, GenerationRequest, GenerationResponse, Usage

__all__ = [
    "GenerationClient",
    "GenerationConfig",
    "get_client",
    "set_client",
    "GenerationRequest",
    "GenerationResponse",
    "ChatMessage",
    "Usage",
    "GenerationError",
    "TransportFailure",
    "TimeoutFailure",
    "ServiceFailure",
    "AuthenticationFailure",
    "RateLimitFailure",
    "InvalidRequestFailure",
    "EmptyOutputFailure",
]
