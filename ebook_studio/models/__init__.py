"""Domain models package.

Note: these models are the source-of-truth schemas for the API and for the
generation service's output contract.
"""

from .api_responses import (
    BlueprintRequest,
    ChapterGenerationData,
    ErrorDetail,
    ExportRequest,
    ExportStartData,
    GenerateChapterRequest,
    MaterializeRequest,
    ResumeMaterializationRequest,
    UpdateBookRequest,
)
from .blueprint import (
    MAX_BLUEPRINT_CHAPTERS,
    Blueprint,
    BookType,
    ChapterOutline,
    SectionOutline,
)
from .book import Book, BookWithChapters, Chapter, ChapterStatus, VoiceProfile
from .export_job import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    ExportFormat,
    ExportJob,
    ExportJobStatus,
)
from .generation_log import GenerationActionType, GenerationLogEntry
from .interview import InterviewResponse

__all__ = [
    # Interview / blueprint
    "InterviewResponse",
    "Blueprint",
    "BookType",
    "ChapterOutline",
    "SectionOutline",
    "MAX_BLUEPRINT_CHAPTERS",
    # Persisted entities
    "Book",
    "BookWithChapters",
    "Chapter",
    "ChapterStatus",
    "VoiceProfile",
    "GenerationActionType",
    "GenerationLogEntry",
    "ExportJob",
    "ExportJobStatus",
    "ExportFormat",
    "ALLOWED_TRANSITIONS",
    "TERMINAL_STATUSES",
    # API payloads
    "BlueprintRequest",
    "MaterializeRequest",
    "ResumeMaterializationRequest",
    "GenerateChapterRequest",
    "UpdateBookRequest",
    "ExportRequest",
    "ChapterGenerationData",
    "ExportStartData",
    "ErrorDetail",
]
