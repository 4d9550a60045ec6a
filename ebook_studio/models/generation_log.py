"""Append-only audit record for generation calls."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GenerationActionType(str, Enum):
    blueprint_generation = "blueprint_generation"
    chapter_generation = "chapter_generation"


class GenerationLogEntry(BaseModel):
    """Usage ledger entry. Immutable once written."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    book_id: Optional[str] = None
    chapter_id: Optional[str] = None
    user_id: Optional[str] = None
    action_type: GenerationActionType
    prompt_excerpt: str = ""
    response_excerpt: str = ""
    model: str
    tokens_used: Optional[int] = None
    credits_charged: int = Field(ge=0)
    created_at: datetime = Field(default_factory=_utcnow)
