"""Generation provider adapters."""

from .anthropic import AnthropicProvider
from .base import GenerationProvider
from .openai import OpenAIProvider

__all__ = ["GenerationProvider", "AnthropicProvider", "OpenAIProvider"]
