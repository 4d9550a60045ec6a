"""Boundary-only exception classes and the error-kind to status table."""

from ebook_studio.services.errors import (
    BookInUseError,
    ChapterBusyError,
    ChapterFinalizedError,
    EmptyInputError,
    InvalidSelectionError,
    InvalidTransitionError,
    MalformedBlueprintError,
    NotFoundError,
    PartialMaterializationError,
)


class UnauthorizedError(Exception):
    """Raised when no resolved user identity accompanies the request."""

    def __init__(self, message: str = "Unauthorized"):
        self.message = message
        super().__init__(message)


# HTTP status per pipeline error class
PIPELINE_ERROR_STATUS: dict[type, int] = {
    EmptyInputError: 400,
    InvalidSelectionError: 400,
    NotFoundError: 404,
    ChapterBusyError: 409,
    ChapterFinalizedError: 409,
    BookInUseError: 409,
    InvalidTransitionError: 409,
    MalformedBlueprintError: 500,
    PartialMaterializationError: 500,
}
