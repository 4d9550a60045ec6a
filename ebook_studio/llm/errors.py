"""Generation service error hierarchy.

Every failure of the text-generation service surfaces as one of three kinds:
transport (network/timeout), service (non-success status) or empty output.
Callers decide whether a retry is safe; the client never retries itself.
"""


class GenerationError(Exception):
    """Base exception for text-generation calls."""

    code = "AI_SERVICE_UNAVAILABLE"

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        request_id: str | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.request_id = request_id
        self.correlation_id = correlation_id

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.provider:
            parts.append(f"provider={self.provider}")
        if self.request_id:
            parts.append(f"request_id={self.request_id}")
        return " ".join(parts)


class TransportFailure(GenerationError):
    """Network failure before a response status was received."""

    pass


class TimeoutFailure(TransportFailure):
    """Request exceeded the per-call timeout."""

    pass


class ServiceFailure(GenerationError):
    """Non-success response status.

    The raw error body is kept for server-side diagnostics only.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        raw_body: str | None = None,
        provider: str | None = None,
        request_id: str | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(message, provider, request_id, correlation_id)
        self.status_code = status_code
        self.raw_body = raw_body


class AuthenticationFailure(ServiceFailure):
    """401/403 - Invalid or missing API key."""

    pass


class RateLimitFailure(ServiceFailure):
    """429 - Rate limit exceeded."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        status_code: int | None = 429,
        raw_body: str | None = None,
        provider: str | None = None,
        request_id: str | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(message, status_code, raw_body, provider, request_id, correlation_id)
        self.retry_after = retry_after


class InvalidRequestFailure(ServiceFailure):
    """400/404 - Malformed request or unknown model."""

    pass


class EmptyOutputFailure(GenerationError):
    """Success status but no usable text in the response."""

    pass


# Failures a caller may reasonably retry (boundary decision, never automatic)
TRANSIENT_FAILURES = (TransportFailure, RateLimitFailure)
