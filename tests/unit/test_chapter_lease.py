"""Unit tests for the per-chapter lease registry."""

import pytest

from ebook_studio.services.chapter_lease import (
    ChapterLeaseRegistry,
    get_lease_registry,
    set_lease_registry,
)
from ebook_studio.services.errors import ChapterBusyError


class TestChapterLeaseRegistry:
    @pytest.mark.asyncio
    async def test_lease_held_inside_block(self):
        leases = ChapterLeaseRegistry()
        async with leases.lease("chapter-1"):
            assert leases.is_held("chapter-1")
            assert not leases.is_held("chapter-2")
        assert not leases.is_held("chapter-1")

    @pytest.mark.asyncio
    async def test_second_lease_fails_fast(self):
        leases = ChapterLeaseRegistry()
        async with leases.lease("chapter-1"):
            with pytest.raises(ChapterBusyError) as exc_info:
                async with leases.lease("chapter-1"):
                    pass
        assert exc_info.value.chapter_id == "chapter-1"
        assert exc_info.value.code == "CHAPTER_BUSY"

    @pytest.mark.asyncio
    async def test_distinct_chapters_lease_independently(self):
        leases = ChapterLeaseRegistry()
        async with leases.lease("chapter-1"), leases.lease("chapter-2"):
            assert len(leases) == 2

    @pytest.mark.asyncio
    async def test_released_on_error(self):
        leases = ChapterLeaseRegistry()
        with pytest.raises(RuntimeError):
            async with leases.lease("chapter-1"):
                raise RuntimeError("generation failed")
        assert len(leases) == 0


def test_singleton_replacement():
    registry = ChapterLeaseRegistry()
    set_lease_registry(registry)
    assert get_lease_registry() is registry
