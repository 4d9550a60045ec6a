"""Blueprint validation: untrusted service text -> Blueprint.

Parse, then validate. Nothing is defaulted or guessed on failure; a
MalformedBlueprintError is raised with the individual schema issues.
"""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from ebook_studio.models import Blueprint

from .errors import MalformedBlueprintError

logger = logging.getLogger(__name__)

# Opening fence with optional language tag, and the closing fence
_LEADING_FENCE = re.compile(r"^\s*```[a-zA-Z0-9_-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?```\s*$")

USER_MESSAGE = "Failed to generate blueprint. Please try again."


def strip_code_fences(raw_text: str) -> str:
    """Remove a wrapping markdown code fence and trim whitespace.

    Only the outermost leading/trailing fence is removed; fences inside
    string values are left alone.

    Examples:
        >>> strip_code_fences('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    text = _LEADING_FENCE.sub("", raw_text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def _format_issue(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
    return f"{location}: {error.get('msg', 'invalid')}"


def validate_blueprint(raw_text: str) -> Blueprint:
    """Convert raw service output into a validated Blueprint.

    Raises:
        MalformedBlueprintError: Empty text, invalid JSON, a non-object
            document, or any schema violation (missing fields, unknown
            book_type, non-positive word counts, chapter count out of range).
    """
    if raw_text is None or not raw_text.strip():
        raise MalformedBlueprintError(USER_MESSAGE, issues=["empty response"])

    cleaned = strip_code_fences(raw_text)

    try:
        document = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning(
            "Blueprint output is not valid JSON: %s",
            e,
            extra={"raw_excerpt": raw_text[:500]},
        )
        raise MalformedBlueprintError(
            USER_MESSAGE, issues=[f"invalid JSON: {e.msg} at line {e.lineno}"]
        ) from e

    if not isinstance(document, dict):
        raise MalformedBlueprintError(
            USER_MESSAGE,
            issues=[f"expected a JSON object, got {type(document).__name__}"],
        )

    try:
        blueprint = Blueprint.model_validate(document)
    except ValidationError as e:
        issues = [_format_issue(err) for err in e.errors()]
        logger.warning(
            "Blueprint output failed schema validation",
            extra={"issues": issues},
        )
        raise MalformedBlueprintError(USER_MESSAGE, issues=issues) from e

    return blueprint
