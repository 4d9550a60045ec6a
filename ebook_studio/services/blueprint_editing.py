"""Edits a user can make to a blueprint before materializing it.

Every function returns a new Blueprint and leaves its input untouched.
"""

from __future__ import annotations

from typing import Optional

from ebook_studio.models import MAX_BLUEPRINT_CHAPTERS, Blueprint, ChapterOutline

from .errors import InvalidSelectionError

NEW_CHAPTER_TITLE = "New Chapter"
NEW_CHAPTER_SUMMARY = "Chapter summary goes here..."
NEW_CHAPTER_WORD_COUNT = 5000


def _check_index(blueprint: Blueprint, index: int) -> None:
    if not 0 <= index < len(blueprint.chapters):
        raise InvalidSelectionError(f"Chapter {index} does not exist")


def _with_chapters(blueprint: Blueprint, chapters: list[ChapterOutline]) -> Blueprint:
    # Revalidate so the chapter-count bounds still hold.
    data = blueprint.model_dump()
    data["chapters"] = [chapter.model_dump() for chapter in chapters]
    return Blueprint.model_validate(data)


def update_chapter(
    blueprint: Blueprint,
    index: int,
    title: Optional[str] = None,
    summary: Optional[str] = None,
    target_word_count: Optional[int] = None,
) -> Blueprint:
    """Change a chapter outline's title, summary or word target."""
    _check_index(blueprint, index)
    chapters = list(blueprint.chapters)
    updates = {
        key: value
        for key, value in (
            ("title", title),
            ("summary", summary),
            ("target_word_count", target_word_count),
        )
        if value is not None
    }
    chapters[index] = ChapterOutline.model_validate(
        {**chapters[index].model_dump(), **updates}
    )
    return _with_chapters(blueprint, chapters)


def remove_chapter(blueprint: Blueprint, index: int) -> Blueprint:
    """Drop a chapter outline. The last remaining chapter cannot be removed."""
    _check_index(blueprint, index)
    if len(blueprint.chapters) == 1:
        raise InvalidSelectionError("A blueprint needs at least one chapter")
    chapters = [c for i, c in enumerate(blueprint.chapters) if i != index]
    return _with_chapters(blueprint, chapters)


def add_chapter(
    blueprint: Blueprint,
    outline: Optional[ChapterOutline] = None,
) -> Blueprint:
    """Append a chapter outline (a placeholder one by default)."""
    if len(blueprint.chapters) >= MAX_BLUEPRINT_CHAPTERS:
        raise InvalidSelectionError(
            f"A blueprint holds at most {MAX_BLUEPRINT_CHAPTERS} chapters"
        )
    outline = outline or ChapterOutline(
        title=NEW_CHAPTER_TITLE,
        summary=NEW_CHAPTER_SUMMARY,
        target_word_count=NEW_CHAPTER_WORD_COUNT,
    )
    return _with_chapters(blueprint, [*blueprint.chapters, outline])
