"""Per-chapter mutual exclusion for generation.

At most one generation per chapter_id runs at a time within this process.
A second request for a held chapter fails fast instead of queueing, since
it would overwrite the first one's content anyway.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from .errors import ChapterBusyError


class ChapterLeaseRegistry:
    """Tracks chapters with an in-flight generation."""

    def __init__(self) -> None:
        self._held: set[str] = set()

    def is_held(self, chapter_id: str) -> bool:
        return chapter_id in self._held

    @asynccontextmanager
    async def lease(self, chapter_id: str) -> AsyncIterator[None]:
        """Hold the lease for ``chapter_id`` for the duration of the block.

        Raises:
            ChapterBusyError: The chapter is already leased.
        """
        # Check-and-add has no await in between, so it is atomic on the loop.
        if chapter_id in self._held:
            raise ChapterBusyError(chapter_id)
        self._held.add(chapter_id)
        try:
            yield
        finally:
            self._held.discard(chapter_id)

    def __len__(self) -> int:
        return len(self._held)


_default_registry: Optional[ChapterLeaseRegistry] = None


def get_lease_registry() -> ChapterLeaseRegistry:
    """Get the process-wide lease registry."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ChapterLeaseRegistry()
    return _default_registry


def set_lease_registry(registry: Optional[ChapterLeaseRegistry]) -> None:
    """Replace the lease registry (for testing)."""
    global _default_registry
    _default_registry = registry
