"""Services package: generation pipelines, persistence and export."""

from . import (
    blueprint_editing,
    blueprint_service,
    book_store,
    chapter_generation,
    export_coordinator,
    materializer,
    usage_ledger,
)
from .blueprint_service import synthesize_blueprint
from .blueprint_validator import strip_code_fences, validate_blueprint
from .chapter_generation import ChapterGenerationResult, generate_chapter
from .export_coordinator import begin_export
from .materializer import materialize, resume_materialization
from .word_count import count_words

__all__ = [
    "blueprint_editing",
    "blueprint_service",
    "book_store",
    "chapter_generation",
    "export_coordinator",
    "materializer",
    "usage_ledger",
    "synthesize_blueprint",
    "validate_blueprint",
    "strip_code_fences",
    "generate_chapter",
    "ChapterGenerationResult",
    "materialize",
    "resume_materialization",
    "begin_export",
    "count_words",
]
