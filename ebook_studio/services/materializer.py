"""Materializer: accepted Blueprint -> persisted Book and Chapters.

The book record is written first, then one chapter per outline in
blueprint order. ``order_index`` is the outline position (0-based,
contiguous) and is the manuscript's authoritative order. Section outlines
are not stored as records; they stay in the book's blueprint snapshot.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence
from uuid import uuid4

from ebook_studio.models import (
    Blueprint,
    Book,
    BookWithChapters,
    Chapter,
    ChapterOutline,
    ChapterStatus,
    VoiceProfile,
)

from . import book_store
from .errors import EmptyInputError, InvalidSelectionError, PartialMaterializationError

logger = logging.getLogger(__name__)


def _build_chapter(book_id: str, order_index: int, outline: ChapterOutline) -> Chapter:
    return Chapter(
        id=str(uuid4()),
        book_id=book_id,
        order_index=order_index,
        title=outline.title,
        summary=outline.summary,
        target_word_count=outline.target_word_count,
        status=ChapterStatus.outline,
    )


async def _insert_chapters(
    book_id: str,
    blueprint: Blueprint,
    indices: Sequence[int],
) -> tuple[list[Chapter], list[int]]:
    """Insert chapters for the given outline positions.

    Keeps going after a failed insert so the caller learns every gap.
    """
    created: list[Chapter] = []
    failed: list[int] = []

    for index in indices:
        chapter = _build_chapter(book_id, index, blueprint.chapters[index])
        try:
            await book_store.insert_chapter(chapter)
        except Exception:
            logger.exception(
                "Failed to insert chapter",
                extra={"book_id": book_id, "order_index": index},
            )
            failed.append(index)
        else:
            created.append(chapter)

    return created, failed


async def materialize(
    blueprint: Blueprint,
    owner: str,
    selected_subtitle_index: int = 0,
    voice_profile: Optional[VoiceProfile] = None,
) -> BookWithChapters:
    """Create a Book and its Chapters from an accepted blueprint.

    Args:
        blueprint: Validated blueprint; stored verbatim as the book's snapshot.
        owner: User id that will own the book.
        selected_subtitle_index: Which of ``subtitle_options`` to use.
        voice_profile: Optional voice to store on the book.

    Returns:
        The new book with exactly ``len(blueprint.chapters)`` chapters.

    Raises:
        EmptyInputError: The blueprint has no chapters.
        InvalidSelectionError: Subtitle index out of range.
        PartialMaterializationError: The book exists but some chapters failed.
    """
    if not blueprint.chapters:
        raise EmptyInputError("Blueprint has no chapters to materialize")

    if not 0 <= selected_subtitle_index < len(blueprint.subtitle_options):
        raise InvalidSelectionError(
            f"Subtitle option {selected_subtitle_index} does not exist; "
            f"choose 0-{len(blueprint.subtitle_options) - 1}"
        )

    book = Book(
        id=str(uuid4()),
        user_id=owner,
        title=blueprint.title,
        subtitle=blueprint.subtitle_options[selected_subtitle_index],
        description=blueprint.description,
        book_type=blueprint.book_type,
        target_audience=blueprint.target_audience,
        target_word_count=blueprint.target_word_count,
        voice_profile=voice_profile,
        blueprint=blueprint.model_copy(deep=True),
    )
    await book_store.insert_book(book)

    created, failed = await _insert_chapters(
        book.id, blueprint, range(len(blueprint.chapters))
    )
    if failed:
        raise PartialMaterializationError(
            book_id=book.id,
            created_chapter_ids=[chapter.id for chapter in created],
            failed_indices=failed,
        )

    logger.info(
        "Materialized book",
        extra={"book_id": book.id, "chapter_count": len(created)},
    )
    return BookWithChapters(book=book, chapters=created)


async def resume_materialization(
    book_id: str,
    owner: str,
    failed_indices: Sequence[int],
) -> BookWithChapters:
    """Create the chapters missing after a partial materialization.

    Positions that already have a chapter are skipped, so calling this twice
    never duplicates chapters.

    Raises:
        NotFoundError: Book missing or not owned by ``owner``.
        InvalidSelectionError: An index is outside the blueprint's chapters.
        PartialMaterializationError: Some of the missing chapters failed again.
    """
    book = await book_store.get_book(book_id, owner)
    blueprint = book.blueprint

    out_of_range = [i for i in failed_indices if not 0 <= i < len(blueprint.chapters)]
    if out_of_range:
        raise InvalidSelectionError(
            f"Chapter positions {out_of_range} are not in the blueprint"
        )

    existing = {chapter.order_index for chapter in await book_store.list_chapters(book_id)}
    missing = sorted({i for i in failed_indices if i not in existing})

    created, failed = await _insert_chapters(book_id, blueprint, missing)
    if failed:
        raise PartialMaterializationError(
            book_id=book_id,
            created_chapter_ids=[chapter.id for chapter in created],
            failed_indices=failed,
        )

    return await book_store.get_book_with_chapters(book_id, owner)
