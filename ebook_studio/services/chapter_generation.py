"""Chapter generation pipeline.

Load book context -> build prompt -> generate -> count words -> save
(best effort) -> record usage (best effort). Generation failures propagate;
save and ledger failures are returned alongside the content.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ebook_studio.llm import GenerationClient, get_client
from ebook_studio.models import (
    Book,
    Chapter,
    ChapterStatus,
    GenerationActionType,
    SectionOutline,
    VoiceProfile,
)

from . import book_store, usage_ledger
from .chapter_lease import ChapterLeaseRegistry, get_lease_registry
from .errors import ChapterFinalizedError, PersistenceWarning
from .prompts import BookContext, build_chapter_prompt
from .usage_ledger import AuditFailure, compute_chapter_credits
from .word_count import count_words

logger = logging.getLogger(__name__)

# Larger than the blueprint budget; sized for a full chapter
CHAPTER_MAX_OUTPUT_TOKENS = 8192


@dataclass
class ChapterGenerationResult:
    """Generated chapter plus the outcome of its side effects."""

    content: str
    word_count: int
    credits_charged: int
    tokens_used: Optional[int] = None
    persistence_warning: Optional[PersistenceWarning] = None
    audit_failure: Optional[AuditFailure] = None

    @property
    def saved(self) -> bool:
        return self.persistence_warning is None


def _stored_sections(book: Book, chapter: Chapter) -> Optional[list[SectionOutline]]:
    """Section outline for a chapter from the book's blueprint snapshot."""
    outlines = book.blueprint.chapters
    if 0 <= chapter.order_index < len(outlines):
        return outlines[chapter.order_index].sections or None
    return None


async def generate_chapter(
    book_id: str,
    chapter_id: str,
    chapter_title: str,
    chapter_summary: str,
    target_word_count: int,
    voice_profile: Optional[VoiceProfile] = None,
    previous_chapter_summary: Optional[str] = None,
    sections: Optional[Sequence[SectionOutline]] = None,
    *,
    user_id: str,
    client: Optional[GenerationClient] = None,
    leases: Optional[ChapterLeaseRegistry] = None,
) -> ChapterGenerationResult:
    """Generate and store the content of one chapter.

    When ``sections`` is omitted, the chapter's section outline from the
    book's blueprint snapshot is used.

    Raises:
        ChapterBusyError: Another generation for this chapter is running.
        ChapterFinalizedError: The chapter is marked final.
        NotFoundError: Book not owned by ``user_id``, or chapter not in book.
        GenerationError: The service call failed; nothing was saved.
    """
    if client is None:
        client = get_client()
    if leases is None:
        leases = get_lease_registry()

    async with leases.lease(chapter_id):
        book = await book_store.get_book(book_id, user_id)
        chapter = await book_store.get_chapter(chapter_id, book_id)
        if chapter.status == ChapterStatus.final:
            raise ChapterFinalizedError(chapter_id)

        section_outline = list(sections) if sections else _stored_sections(book, chapter)
        context = BookContext(
            title=book.title,
            book_type=book.book_type.value,
            target_audience=book.target_audience,
            voice_profile=book.voice_profile,
        )
        system_instructions, user_message = build_chapter_prompt(
            context,
            chapter_title=chapter_title,
            chapter_summary=chapter_summary,
            target_word_count=target_word_count,
            voice_profile=voice_profile,
            previous_chapter_summary=previous_chapter_summary,
            section_outline=section_outline,
        )

        response = await client.generate(
            system_instructions,
            user_message,
            max_output_tokens=CHAPTER_MAX_OUTPUT_TOKENS,
        )
        content = response.text
        word_count = count_words(content)

        persistence_warning = None
        try:
            await book_store.update_chapter_content(
                chapter_id,
                content=content,
                word_count=word_count,
                status=ChapterStatus.draft,
            )
        except ChapterFinalizedError:
            logger.warning(
                "Chapter was marked final during generation; content not saved",
                extra={"book_id": book_id, "chapter_id": chapter_id},
            )
            persistence_warning = PersistenceWarning(
                chapter_id=chapter_id,
                message="The chapter was marked final while generating, so the new content was not saved.",
            )
        except Exception:
            logger.exception(
                "Generated chapter could not be saved",
                extra={"book_id": book_id, "chapter_id": chapter_id},
            )
            persistence_warning = PersistenceWarning(
                chapter_id=chapter_id,
                message="The chapter was generated but could not be saved. Please save it again.",
            )

        credits = compute_chapter_credits(target_word_count)
        audit_failure = await usage_ledger.record_generation(
            action_type=GenerationActionType.chapter_generation,
            model=response.model,
            prompt=chapter_summary,
            response=content,
            credits_charged=credits,
            tokens_used=response.tokens_used,
            book_id=book_id,
            chapter_id=chapter_id,
            user_id=user_id,
        )

    logger.info(
        "Chapter generated",
        extra={
            "book_id": book_id,
            "chapter_id": chapter_id,
            "word_count": word_count,
            "saved": persistence_warning is None,
        },
    )
    return ChapterGenerationResult(
        content=content,
        word_count=word_count,
        credits_charged=credits,
        tokens_used=response.tokens_used,
        persistence_warning=persistence_warning,
        audit_failure=audit_failure,
    )
