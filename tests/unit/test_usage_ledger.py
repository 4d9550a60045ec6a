"""Unit tests for the usage ledger."""

import logging
from unittest.mock import AsyncMock, patch

import pytest

from ebook_studio.models import GenerationActionType
from ebook_studio.services import usage_ledger
from ebook_studio.services.usage_ledger import (
    PROMPT_EXCERPT_CHARS,
    RESPONSE_EXCERPT_CHARS,
    compute_chapter_credits,
    excerpt,
    list_generation_logs,
    record_generation,
    total_credits_charged,
)


@pytest.mark.parametrize(
    "words,credits",
    [(1, 20), (999, 20), (1000, 20), (1001, 40), (4500, 100), (5000, 100), (20000, 400)],
)
def test_compute_chapter_credits(words, credits):
    assert compute_chapter_credits(words) == credits


def test_excerpt():
    assert excerpt(None, 10) == ""
    assert excerpt("short", 10) == "short"
    assert excerpt("x" * 20, 10) == "x" * 10


class TestRecordGeneration:
    """Tests for ledger writes."""

    @pytest.mark.asyncio
    async def test_entry_is_truncated_and_stored(self, mock_db):
        failure = await record_generation(
            action_type=GenerationActionType.chapter_generation,
            model="claude-test",
            prompt="p" * 3000,
            response="r" * 9000,
            credits_charged=40,
            tokens_used=2500,
            book_id="book-1",
            chapter_id="chapter-1",
            user_id="user-1",
        )

        assert failure is None
        logs = await list_generation_logs("book-1")
        assert len(logs) == 1
        assert len(logs[0].prompt_excerpt) == PROMPT_EXCERPT_CHARS
        assert len(logs[0].response_excerpt) == RESPONSE_EXCERPT_CHARS
        assert logs[0].model == "claude-test"

    @pytest.mark.asyncio
    async def test_total_credits(self, mock_db):
        for credits in (20, 100, 0):
            await record_generation(
                action_type=GenerationActionType.chapter_generation,
                model="m",
                prompt="p",
                response="r",
                credits_charged=credits,
                book_id="book-1",
            )
        await record_generation(
            action_type=GenerationActionType.chapter_generation,
            model="m",
            prompt="p",
            response="r",
            credits_charged=999,
            book_id="book-2",
        )

        assert await total_credits_charged("book-1") == 120

    @pytest.mark.asyncio
    async def test_write_failure_is_returned_not_raised(self, caplog):
        with patch.object(usage_ledger, "get_database", AsyncMock(side_effect=ConnectionError("refused"))):
            with caplog.at_level(logging.ERROR, logger="ebook_studio.audit"):
                failure = await record_generation(
                    action_type=GenerationActionType.blueprint_generation,
                    model="m",
                    prompt="p",
                    response="r",
                    credits_charged=0,
                )

        assert failure is not None
        assert failure.action_type == GenerationActionType.blueprint_generation
        assert failure.error == "refused"
        assert "Usage ledger write failed" in caplog.text
