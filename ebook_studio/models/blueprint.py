"""Blueprint models: the proposed book plan prior to persistence.

These models are the validation contract for the generation service's
output. The schema text in ``services/prompts.py`` describes the same
fields; keep the two in lockstep.

Pydantic v2. Unknown fields from the service are ignored; missing or
mistyped required fields are rejected.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

# Upper bound on chapters accepted from the service
MAX_BLUEPRINT_CHAPTERS = 20

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
# Strict: JSON booleans, numeric strings and floats are rejected, not coerced.
PositiveInt = Annotated[int, Field(gt=0, strict=True)]


class BookType(str, Enum):
    """Book genre/category."""

    fiction = "fiction"
    nonfiction = "nonfiction"
    guide = "guide"
    memoir = "memoir"
    academic = "academic"
    children = "children"
    other = "other"


class SectionOutline(BaseModel):
    """A planned section within a chapter."""

    model_config = ConfigDict(extra="ignore")

    title: NonEmptyStr
    summary: str = ""
    target_word_count: PositiveInt


class ChapterOutline(BaseModel):
    """A planned chapter.

    Section word counts are advisory and need not sum to the chapter's.
    """

    model_config = ConfigDict(extra="ignore")

    title: NonEmptyStr
    summary: str
    target_word_count: PositiveInt
    sections: list[SectionOutline] = Field(default_factory=list)


class Blueprint(BaseModel):
    """Structured book plan proposed by the generation service."""

    model_config = ConfigDict(extra="ignore")

    title: NonEmptyStr
    subtitle_options: Annotated[list[NonEmptyStr], Field(min_length=1)]
    description: str
    target_audience: str
    book_type: BookType
    target_word_count: PositiveInt
    tone: str
    chapters: Annotated[
        list[ChapterOutline],
        Field(min_length=1, max_length=MAX_BLUEPRINT_CHAPTERS),
    ]
    research_needs: list[str] = Field(default_factory=list)
    media_requirements: list[str] = Field(default_factory=list)
    estimated_credits: Annotated[int, Field(ge=0, strict=True)] = 0

    @field_validator("book_type", mode="before")
    @classmethod
    def _normalize_book_type(cls, value: object) -> object:
        # Case and surrounding whitespace only; anything else must match exactly.
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def planned_word_count(self) -> int:
        """Sum of the chapter targets."""
        return sum(chapter.target_word_count for chapter in self.chapters)
