"""Unit tests for blueprint materialization."""

from unittest.mock import patch

import pytest

from ebook_studio.models import ChapterStatus, VoiceProfile
from ebook_studio.services import book_store
from ebook_studio.services.errors import (
    EmptyInputError,
    InvalidSelectionError,
    NotFoundError,
    PartialMaterializationError,
)
from ebook_studio.services.materializer import materialize, resume_materialization

OWNER = "user-123"


def failing_insert(fail_at: set[int]):
    """insert_chapter replacement that fails for the given order indices."""
    real_insert = book_store.insert_chapter

    async def insert(chapter):
        if chapter.order_index in fail_at:
            raise RuntimeError("write rejected")
        return await real_insert(chapter)

    return insert


class TestMaterialize:
    """Tests for materialize."""

    @pytest.mark.asyncio
    async def test_creates_book_and_ordered_chapters(self, mock_db, blueprint):
        result = await materialize(blueprint, owner=OWNER)

        assert result.book.user_id == OWNER
        assert result.book.title == blueprint.title
        assert result.book.subtitle == blueprint.subtitle_options[0]
        assert result.book.blueprint == blueprint

        assert [c.order_index for c in result.chapters] == [0, 1, 2]
        assert [c.title for c in result.chapters] == [c.title for c in blueprint.chapters]
        assert all(c.status == ChapterStatus.outline for c in result.chapters)
        assert all(c.content == "" and c.word_count == 0 for c in result.chapters)
        assert all(c.book_id == result.book.id for c in result.chapters)

        stored = await book_store.get_book_with_chapters(result.book.id, OWNER)
        assert [c.id for c in stored.chapters] == [c.id for c in result.chapters]

    @pytest.mark.asyncio
    async def test_selected_subtitle_and_voice(self, mock_db, blueprint):
        voice = VoiceProfile(tone="warm", style=["stories"])
        result = await materialize(blueprint, owner=OWNER, selected_subtitle_index=1, voice_profile=voice)

        assert result.book.subtitle == "A Field Guide to Sustainable Ambition"
        stored = await book_store.get_book(result.book.id, OWNER)
        assert stored.voice_profile == voice

    @pytest.mark.asyncio
    async def test_bad_subtitle_index(self, mock_db, blueprint):
        with pytest.raises(InvalidSelectionError):
            await materialize(blueprint, owner=OWNER, selected_subtitle_index=5)
        assert await book_store.list_books(OWNER) == []

    @pytest.mark.asyncio
    async def test_no_chapters(self, mock_db, blueprint):
        empty = blueprint.model_copy(update={"chapters": []})
        with pytest.raises(EmptyInputError):
            await materialize(empty, owner=OWNER)
        assert await book_store.list_books(OWNER) == []

    @pytest.mark.asyncio
    async def test_section_outlines_stay_in_snapshot(self, mock_db, blueprint):
        result = await materialize(blueprint, owner=OWNER)
        stored = await book_store.get_book(result.book.id, OWNER)
        assert stored.blueprint.chapters[0].sections[0].title == "Lottery Thinking"

    @pytest.mark.asyncio
    async def test_partial_failure_reports_gaps(self, mock_db, blueprint):
        with patch.object(book_store, "insert_chapter", failing_insert({1})):
            with pytest.raises(PartialMaterializationError) as exc_info:
                await materialize(blueprint, owner=OWNER)

        error = exc_info.value
        assert error.failed_indices == [1]
        assert len(error.created_chapter_ids) == 2

        chapters = await book_store.list_chapters(error.book_id)
        assert [c.order_index for c in chapters] == [0, 2]


class TestResumeMaterialization:
    """Tests for resume_materialization."""

    @pytest.mark.asyncio
    async def test_resume_fills_gap(self, mock_db, blueprint):
        with patch.object(book_store, "insert_chapter", failing_insert({0, 2})):
            with pytest.raises(PartialMaterializationError) as exc_info:
                await materialize(blueprint, owner=OWNER)
        book_id = exc_info.value.book_id

        result = await resume_materialization(book_id, owner=OWNER, failed_indices=[0, 2])

        assert [c.order_index for c in result.chapters] == [0, 1, 2]
        assert result.chapters[0].title == "The Myth of the Big Break"

    @pytest.mark.asyncio
    async def test_resume_is_idempotent(self, mock_db, blueprint):
        created = await materialize(blueprint, owner=OWNER)

        result = await resume_materialization(created.book.id, owner=OWNER, failed_indices=[0, 1])

        assert len(result.chapters) == 3

    @pytest.mark.asyncio
    async def test_resume_rejects_unknown_position(self, mock_db, blueprint):
        created = await materialize(blueprint, owner=OWNER)
        with pytest.raises(InvalidSelectionError):
            await resume_materialization(created.book.id, owner=OWNER, failed_indices=[7])

    @pytest.mark.asyncio
    async def test_resume_other_users_book(self, mock_db, blueprint):
        created = await materialize(blueprint, owner=OWNER)
        with pytest.raises(NotFoundError):
            await resume_materialization(created.book.id, owner="someone-else", failed_indices=[0])
