"""Blueprint pipeline: interview responses -> validated Blueprint.

Prompt builder -> generation client -> blueprint validator. Nothing is
persisted except a best-effort ledger entry, so the whole call is safe to
retry.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ebook_studio.llm import GenerationClient, get_client
from ebook_studio.models import Blueprint, GenerationActionType, InterviewResponse

from . import usage_ledger
from .blueprint_validator import validate_blueprint
from .errors import EmptyInputError
from .prompts import build_blueprint_prompt

logger = logging.getLogger(__name__)

# Sized for a full 8-15 chapter outline
BLUEPRINT_MAX_OUTPUT_TOKENS = 4096

# Blueprint synthesis is not billed
BLUEPRINT_CREDITS = 0


async def synthesize_blueprint(
    responses: Sequence[InterviewResponse],
    client: Optional[GenerationClient] = None,
    user_id: Optional[str] = None,
) -> Blueprint:
    """Produce a Blueprint from interview responses.

    Args:
        responses: Ordered interview answers.
        client: Generation client; the process-wide one by default.
        user_id: Requesting user, recorded on the ledger entry.

    Returns:
        A Blueprint satisfying every schema invariant.

    Raises:
        EmptyInputError: ``responses`` is empty (checked before any I/O).
        GenerationError: The service was unreachable, failed, or returned
            nothing.
        MalformedBlueprintError: The service's output is not a valid blueprint.
    """
    if not responses:
        raise EmptyInputError("Interview responses are required")

    if client is None:
        client = get_client()
    system_instructions, user_message = build_blueprint_prompt(responses)

    response = await client.generate(
        system_instructions,
        user_message,
        max_output_tokens=BLUEPRINT_MAX_OUTPUT_TOKENS,
    )

    # The call was made and billed by the service whether or not the
    # output validates, so it is recorded before validation.
    await usage_ledger.record_generation(
        action_type=GenerationActionType.blueprint_generation,
        model=response.model,
        prompt=user_message,
        response=response.text,
        credits_charged=BLUEPRINT_CREDITS,
        tokens_used=response.tokens_used,
        user_id=user_id,
    )

    blueprint = validate_blueprint(response.text)
    logger.info(
        "Blueprint synthesized",
        extra={
            "chapter_count": len(blueprint.chapters),
            "book_type": blueprint.book_type.value,
        },
    )
    return blueprint
