"""Response envelope: every body is ``{"data": ..., "error": ...}``."""

from typing import Any

from ebook_studio.models import ErrorDetail


def success_response(data: Any) -> dict[str, Any]:
    """Create a success response envelope."""
    return {"data": data, "error": None}


def error_response(code: str, message: str, data: Any = None) -> dict[str, Any]:
    """Create an error response envelope.

    ``data`` is normally None; it carries recovery details for errors the
    client can act on, such as a partially materialized book.
    """
    return {"data": data, "error": ErrorDetail(code=code, message=message).model_dump()}
