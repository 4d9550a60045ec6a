"""Abstract base class for generation providers."""

from abc import ABC, abstractmethod
from typing import Any

from ..errors import (
    AuthenticationFailure,
    InvalidRequestFailure,
    RateLimitFailure,
    ServiceFailure,
)
from ..models import GenerationRequest, GenerationResponse


class GenerationProvider(ABC):
    """Base interface for text-generation providers.

    Implementations translate SDK exceptions into the GenerationError
    hierarchy and never retry on their own.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier: 'anthropic', 'openai'."""
        ...

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Send a request and return the response.

        Raises:
            TransportFailure: Network failure or timeout.
            ServiceFailure: Non-success response status.
            EmptyOutputFailure: Success status without usable text.
        """
        ...

    def _map_status_error(self, error: Any) -> ServiceFailure:
        """Convert an SDK status error (status_code/message/response) to a ServiceFailure."""
        status_code = error.status_code
        message = str(getattr(error, "message", error))
        request_id = getattr(error, "request_id", None)
        response = getattr(error, "response", None)

        raw_body = None
        if response is not None:
            try:
                raw_body = response.text
            except Exception:
                raw_body = None

        if status_code in (401, 403):
            return AuthenticationFailure(
                f"{self.name} rejected credentials ({status_code})",
                status_code=status_code,
                raw_body=raw_body,
                provider=self.name,
                request_id=request_id,
            )

        if status_code == 429:
            retry_after = None
            if response is not None:
                retry_after_str = response.headers.get("retry-after")
                if retry_after_str:
                    try:
                        retry_after = float(retry_after_str)
                    except ValueError:
                        pass
            return RateLimitFailure(
                f"{self.name} rate limit exceeded: {message}",
                retry_after=retry_after,
                raw_body=raw_body,
                provider=self.name,
                request_id=request_id,
            )

        if status_code in (400, 404, 422):
            return InvalidRequestFailure(
                f"Invalid request to {self.name}: {message}",
                status_code=status_code,
                raw_body=raw_body,
                provider=self.name,
                request_id=request_id,
            )

        return ServiceFailure(
            f"{self.name} error ({status_code}): {message}",
            status_code=status_code,
            raw_body=raw_body,
            provider=self.name,
            request_id=request_id,
        )
