"""Book and chapter persistence.

Every book lookup is filtered by ``user_id``; the caller supplies the
resolved identity. Chapter writes are scoped to a single chapter record so
concurrent generation of distinct chapters never touches shared state.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from ebook_studio.db.mongo import get_database
from ebook_studio.models import (
    Blueprint,
    Book,
    BookType,
    BookWithChapters,
    Chapter,
    ChapterStatus,
    UpdateBookRequest,
    VoiceProfile,
)

from .errors import BookInUseError, ChapterFinalizedError, NotFoundError

logger = logging.getLogger(__name__)

BOOKS_COLLECTION = "books"
CHAPTERS_COLLECTION = "chapters"


def _book_to_doc(book: Book) -> dict:
    doc = book.model_dump(mode="json", exclude={"id", "created_at", "updated_at"})
    doc["_id"] = book.id
    doc["created_at"] = book.created_at
    doc["updated_at"] = book.updated_at
    return doc


def _doc_to_book(doc: dict) -> Book:
    """Convert MongoDB document to Book model."""
    voice_profile = doc.get("voice_profile")
    return Book(
        id=doc["_id"],
        user_id=doc["user_id"],
        title=doc["title"],
        subtitle=doc.get("subtitle", ""),
        description=doc.get("description", ""),
        book_type=BookType(doc["book_type"]),
        target_audience=doc.get("target_audience", ""),
        target_word_count=doc["target_word_count"],
        voice_profile=VoiceProfile(**voice_profile) if voice_profile else None,
        blueprint=Blueprint.model_validate(doc["blueprint"]),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


def _chapter_to_doc(chapter: Chapter) -> dict:
    doc = chapter.model_dump(mode="json", exclude={"id", "created_at", "updated_at"})
    doc["_id"] = chapter.id
    doc["created_at"] = chapter.created_at
    doc["updated_at"] = chapter.updated_at
    return doc


def _doc_to_chapter(doc: dict) -> Chapter:
    """Convert MongoDB document to Chapter model."""
    return Chapter(
        id=doc["_id"],
        book_id=doc["book_id"],
        order_index=doc["order_index"],
        title=doc["title"],
        summary=doc.get("summary", ""),
        target_word_count=doc["target_word_count"],
        content=doc.get("content", ""),
        word_count=doc.get("word_count", 0),
        status=ChapterStatus(doc.get("status", ChapterStatus.outline.value)),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


async def ensure_indexes() -> None:
    """Create lookup indexes; one chapter per (book, position)."""
    try:
        db = await get_database()
        await db[BOOKS_COLLECTION].create_index([("user_id", 1), ("updated_at", -1)])
        await db[CHAPTERS_COLLECTION].create_index(
            [("book_id", 1), ("order_index", 1)], unique=True
        )
        logger.info("Book store indexes created")
    except Exception as e:
        logger.warning(f"Failed to create book store indexes: {e}")


# =============================================================================
# Books
# =============================================================================


async def insert_book(book: Book) -> Book:
    """Insert a new book record."""
    db = await get_database()
    await db[BOOKS_COLLECTION].insert_one(_book_to_doc(book))
    return book


async def get_book(book_id: str, user_id: str) -> Book:
    """Get a book owned by ``user_id``.

    Raises:
        NotFoundError: Missing book or owned by someone else.
    """
    db = await get_database()
    doc = await db[BOOKS_COLLECTION].find_one({"_id": book_id, "user_id": user_id})
    if doc is None:
        raise NotFoundError("book", book_id)
    return _doc_to_book(doc)


async def list_books(user_id: str) -> list[Book]:
    """List a user's books, most recently updated first."""
    db = await get_database()
    cursor = db[BOOKS_COLLECTION].find({"user_id": user_id}).sort("updated_at", -1)
    docs = await cursor.to_list(length=None)
    return [_doc_to_book(doc) for doc in docs]


async def update_book_metadata(
    book_id: str, user_id: str, request: UpdateBookRequest
) -> Book:
    """Apply metadata edits. The blueprint snapshot is never changed."""
    db = await get_database()
    collection = db[BOOKS_COLLECTION]

    existing = await collection.find_one({"_id": book_id, "user_id": user_id})
    if existing is None:
        raise NotFoundError("book", book_id)

    update_doc: dict = request.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    update_doc["updated_at"] = datetime.now(timezone.utc)
    await collection.update_one({"_id": book_id}, {"$set": update_doc})

    updated_doc = await collection.find_one({"_id": book_id})
    return _doc_to_book(updated_doc)


async def delete_book(book_id: str, user_id: str) -> bool:
    """Discard a book and its chapters.

    Meant for abandoning a book whose materialization only partly
    succeeded, so it is refused once any chapter holds content or has
    moved past ``outline``.

    Raises:
        NotFoundError: Book missing or not owned by ``user_id``.
        BookInUseError: A chapter has already been written.
    """
    db = await get_database()
    if await db[BOOKS_COLLECTION].find_one({"_id": book_id, "user_id": user_id}) is None:
        raise NotFoundError("book", book_id)

    written = await db[CHAPTERS_COLLECTION].find_one(
        {
            "book_id": book_id,
            "$or": [
                {"status": {"$ne": ChapterStatus.outline.value}},
                {"content": {"$nin": ["", None]}},
            ],
        }
    )
    if written is not None:
        raise BookInUseError(book_id)

    await db[CHAPTERS_COLLECTION].delete_many({"book_id": book_id})
    await db[BOOKS_COLLECTION].delete_one({"_id": book_id, "user_id": user_id})
    logger.info(f"Discarded book {book_id}")
    return True


# =============================================================================
# Chapters
# =============================================================================


async def insert_chapter(chapter: Chapter) -> Chapter:
    """Insert one chapter record."""
    db = await get_database()
    await db[CHAPTERS_COLLECTION].insert_one(_chapter_to_doc(chapter))
    return chapter


async def get_chapter(chapter_id: str, book_id: str) -> Chapter:
    """Get a chapter that belongs to ``book_id``."""
    db = await get_database()
    doc = await db[CHAPTERS_COLLECTION].find_one({"_id": chapter_id, "book_id": book_id})
    if doc is None:
        raise NotFoundError("chapter", chapter_id)
    return _doc_to_chapter(doc)


async def list_chapters(book_id: str) -> list[Chapter]:
    """List a book's chapters in manuscript order."""
    db = await get_database()
    cursor = db[CHAPTERS_COLLECTION].find({"book_id": book_id}).sort("order_index", 1)
    docs = await cursor.to_list(length=None)
    return [_doc_to_chapter(doc) for doc in docs]


async def update_chapter_content(
    chapter_id: str,
    content: str,
    word_count: int,
    status: Optional[ChapterStatus] = None,
) -> None:
    """Save generated content on a single chapter record.

    A chapter the editor has marked ``final`` is never overwritten.

    Raises:
        NotFoundError: The chapter no longer exists.
        ChapterFinalizedError: The chapter is ``final``.
    """
    db = await get_database()
    update_doc: dict = {
        "content": content,
        "word_count": word_count,
        "updated_at": datetime.now(timezone.utc),
    }
    if status is not None:
        update_doc["status"] = status.value

    result = await db[CHAPTERS_COLLECTION].update_one(
        {"_id": chapter_id, "status": {"$ne": ChapterStatus.final.value}},
        {"$set": update_doc},
    )
    if result.matched_count == 0:
        if await db[CHAPTERS_COLLECTION].find_one({"_id": chapter_id}) is not None:
            raise ChapterFinalizedError(chapter_id)
        raise NotFoundError("chapter", chapter_id)


async def get_book_with_chapters(book_id: str, user_id: str) -> BookWithChapters:
    """Load a book and its chapters ordered by order_index."""
    book = await get_book(book_id, user_id)
    chapters = await list_chapters(book_id)
    return BookWithChapters(book=book, chapters=chapters)
