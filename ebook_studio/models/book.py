"""Persisted Book and Chapter models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

from .blueprint import Blueprint, BookType


def _utcnow() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


class ChapterStatus(str, Enum):
    """Chapter lifecycle: outline -> draft -> final."""

    outline = "outline"
    draft = "draft"
    final = "final"


class VoiceProfile(BaseModel):
    """Prose style settings for chapter generation."""

    tone: Optional[str] = None
    style: list[str] = Field(default_factory=list)
    vocabulary_level: Optional[str] = None


class Book(BaseModel):
    """A book owned by exactly one user."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(description="UUID identifier")
    user_id: str = Field(description="Owning user")
    title: str
    subtitle: str = ""
    description: str = ""
    book_type: BookType
    target_audience: str = ""
    target_word_count: Annotated[int, Field(gt=0)]
    voice_profile: Optional[VoiceProfile] = None
    blueprint: Blueprint = Field(description="Originating blueprint snapshot")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Chapter(BaseModel):
    """A chapter record; order_index defines manuscript order."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(description="UUID identifier")
    book_id: str
    order_index: Annotated[int, Field(ge=0)]
    title: str
    summary: str = ""
    target_word_count: Annotated[int, Field(gt=0)]
    content: str = ""
    word_count: Annotated[int, Field(ge=0)] = 0
    status: ChapterStatus = ChapterStatus.outline
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class BookWithChapters(BaseModel):
    """A book together with its chapters in manuscript order."""

    book: Book
    chapters: list[Chapter]

    @property
    def total_word_count(self) -> int:
        return sum(chapter.word_count for chapter in self.chapters)
