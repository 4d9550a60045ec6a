"""Usage ledger: append-only audit of generation calls.

Writes are best effort. A failed write never fails the generation it
describes; it is logged on the ``ebook_studio.audit`` logger and returned
to the caller as an ``AuditFailure`` value.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from ebook_studio.db.mongo import get_database
from ebook_studio.models import GenerationActionType, GenerationLogEntry

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("ebook_studio.audit")

GENERATION_LOGS_COLLECTION = "generation_logs"

PROMPT_EXCERPT_CHARS = 1000
RESPONSE_EXCERPT_CHARS = 5000
CREDITS_PER_THOUSAND_WORDS = 20


@dataclass
class AuditFailure:
    """A ledger write that did not happen."""

    action_type: GenerationActionType
    error: str
    book_id: Optional[str] = None
    chapter_id: Optional[str] = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def compute_chapter_credits(target_word_count: int) -> int:
    """Credits for a chapter: 20 per started 1000 requested words.

    Examples:
        >>> compute_chapter_credits(4500)
        100
        >>> compute_chapter_credits(1000)
        20
    """
    return math.ceil(target_word_count / 1000) * CREDITS_PER_THOUSAND_WORDS


def excerpt(text: Optional[str], limit: int) -> str:
    """Truncate ``text`` to at most ``limit`` characters."""
    if not text:
        return ""
    return text[:limit]


async def record_generation(
    action_type: GenerationActionType,
    model: str,
    prompt: str,
    response: str,
    credits_charged: int,
    tokens_used: Optional[int] = None,
    book_id: Optional[str] = None,
    chapter_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> Optional[AuditFailure]:
    """Append a ledger entry.

    Returns:
        None on success, or an AuditFailure describing the failed write.
    """
    entry = GenerationLogEntry(
        id=str(uuid4()),
        book_id=book_id,
        chapter_id=chapter_id,
        user_id=user_id,
        action_type=action_type,
        prompt_excerpt=excerpt(prompt, PROMPT_EXCERPT_CHARS),
        response_excerpt=excerpt(response, RESPONSE_EXCERPT_CHARS),
        model=model,
        tokens_used=tokens_used,
        credits_charged=credits_charged,
    )

    try:
        db = await get_database()
        doc = entry.model_dump(mode="json", exclude={"id", "created_at"})
        doc["_id"] = entry.id
        doc["created_at"] = entry.created_at
        await db[GENERATION_LOGS_COLLECTION].insert_one(doc)
    except Exception as e:
        failure = AuditFailure(
            action_type=action_type,
            error=str(e) or type(e).__name__,
            book_id=book_id,
            chapter_id=chapter_id,
        )
        audit_logger.error(
            "Usage ledger write failed: %s",
            failure.error,
            extra={
                "action_type": action_type.value,
                "book_id": book_id,
                "chapter_id": chapter_id,
                "credits_charged": credits_charged,
                "tokens_used": tokens_used,
            },
        )
        return failure

    logger.debug(
        "Recorded %s",
        action_type.value,
        extra={"book_id": book_id, "chapter_id": chapter_id, "credits_charged": credits_charged},
    )
    return None


async def list_generation_logs(book_id: str) -> list[GenerationLogEntry]:
    """Ledger entries for a book, oldest first."""
    db = await get_database()
    cursor = db[GENERATION_LOGS_COLLECTION].find({"book_id": book_id}).sort("created_at", 1)
    docs = await cursor.to_list(length=None)
    return [
        GenerationLogEntry(id=doc.pop("_id"), **doc)
        for doc in docs
    ]


async def total_credits_charged(book_id: str) -> int:
    """Sum of credits charged for a book."""
    return sum(entry.credits_charged for entry in await list_generation_logs(book_id))
