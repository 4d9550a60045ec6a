"""Request and response payloads for the HTTP boundary."""

from __future__ import annotations

from typing import Annotated, Any, Optional

from pydantic import BaseModel, Field

from .blueprint import Blueprint, SectionOutline
from .book import VoiceProfile
from .export_job import ExportFormat
from .interview import InterviewResponse


class ErrorDetail(BaseModel):
    """Error envelope payload."""

    code: str
    message: str


# =============================================================================
# Requests
# =============================================================================


class BlueprintRequest(BaseModel):
    """Request body for blueprint synthesis.

    An empty list is accepted here and rejected by the pipeline so the
    error kind stays EMPTY_INPUT.
    """

    interview_responses: list[InterviewResponse] = Field(default_factory=list)


class MaterializeRequest(BaseModel):
    """Request body for turning an accepted blueprint into a book."""

    blueprint: Blueprint
    selected_subtitle_index: Annotated[int, Field(ge=0)] = 0
    voice_profile: Optional[VoiceProfile] = None


class ResumeMaterializationRequest(BaseModel):
    """Request body for creating chapters missing after a partial failure."""

    failed_indices: Annotated[list[int], Field(min_length=1)]


class GenerateChapterRequest(BaseModel):
    """Request body for chapter generation."""

    book_id: str
    chapter_id: str
    chapter_title: Annotated[str, Field(min_length=1)]
    chapter_summary: str = ""
    target_word_count: Annotated[int, Field(gt=0)]
    voice_profile: Optional[VoiceProfile] = None
    previous_chapter_summary: Optional[str] = None
    sections: Optional[list[SectionOutline]] = None


class UpdateBookRequest(BaseModel):
    """Metadata edits for a book. Omitted fields are left unchanged."""

    title: Optional[Annotated[str, Field(min_length=1)]] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None
    target_audience: Optional[str] = None
    voice_profile: Optional[VoiceProfile] = None


class ExportRequest(BaseModel):
    """Request body for starting an export."""

    book_id: str
    format: ExportFormat = ExportFormat.epub
    settings: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Response data
# =============================================================================


class ChapterGenerationData(BaseModel):
    """Successful chapter generation payload.

    ``persistence_warning`` is set when the content was generated but could
    not be saved; the client should retry the save.
    """

    content: str
    word_count: int
    saved: bool = True
    persistence_warning: Optional[ErrorDetail] = None


class ExportStartData(BaseModel):
    export_id: str
    status: str
