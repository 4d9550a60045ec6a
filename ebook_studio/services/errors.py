"""Pipeline error taxonomy.

Every expected failure carries a stable ``code`` that the API layer maps to
an HTTP status. Messages are safe to show to users; diagnostics (raw model
output, service error bodies) stay in the server logs.
"""

from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Base class for expected pipeline failures."""

    code = "PIPELINE_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class EmptyInputError(PipelineError):
    """No interview responses, or no chapters to materialize."""

    code = "EMPTY_INPUT"


class MalformedBlueprintError(PipelineError):
    """Service output could not be parsed or failed schema validation."""

    code = "MALFORMED_BLUEPRINT"

    def __init__(self, message: str, issues: Optional[list[str]] = None):
        super().__init__(message)
        self.issues = issues or []


class NotFoundError(PipelineError):
    """Book or chapter missing, or not owned by the requesting user."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} with ID '{entity_id}' not found")


class InvalidSelectionError(PipelineError):
    """A caller-supplied choice does not refer to anything in the blueprint."""

    code = "VALIDATION_ERROR"


class PartialMaterializationError(PipelineError):
    """The book was created but some of its chapters were not.

    The caller may retry only ``failed_indices`` or discard the book.
    """

    code = "PARTIAL_MATERIALIZATION"

    def __init__(
        self,
        book_id: str,
        created_chapter_ids: list[str],
        failed_indices: list[int],
    ):
        self.book_id = book_id
        self.created_chapter_ids = created_chapter_ids
        self.failed_indices = failed_indices
        super().__init__(
            f"Book '{book_id}' was created but {len(failed_indices)} chapter(s) "
            f"could not be saved"
        )


class ChapterBusyError(PipelineError):
    """Another generation for the same chapter is already running."""

    code = "CHAPTER_BUSY"

    def __init__(self, chapter_id: str):
        self.chapter_id = chapter_id
        super().__init__(f"Chapter '{chapter_id}' is already being generated")


class ChapterFinalizedError(PipelineError):
    """The editor has marked the chapter final; generation may not overwrite it."""

    code = "CHAPTER_FINAL"

    def __init__(self, chapter_id: str):
        self.chapter_id = chapter_id
        super().__init__(f"Chapter '{chapter_id}' is final and cannot be regenerated")


class BookInUseError(PipelineError):
    """Only a book with no written chapters may be discarded."""

    code = "BOOK_IN_USE"

    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"Book '{book_id}' has written chapters and cannot be discarded")


class InvalidTransitionError(PipelineError):
    """Export job status change not allowed by the state machine."""

    code = "INVALID_TRANSITION"

    def __init__(self, job_id: str, current: str, requested: str):
        self.job_id = job_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Export job '{job_id}' cannot move from {current} to {requested}"
        )


class PersistenceWarning:
    """A save that failed after generation succeeded.

    Returned alongside the generated content rather than raised.
    """

    code = "PERSISTENCE_FAILED"

    def __init__(self, chapter_id: str, message: str):
        self.chapter_id = chapter_id
        self.message = message

    def __repr__(self) -> str:
        return f"PersistenceWarning(chapter_id={self.chapter_id!r}, message={self.message!r})"
