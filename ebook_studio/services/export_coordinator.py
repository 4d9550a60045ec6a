"""Export coordinator.

Creates an export job in ``processing``, hands the ordered manuscript to
the renderer in a background task and records the terminal status.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from ebook_studio.models import BookWithChapters, ExportFormat, ExportJob

from . import book_store
from .errors import EmptyInputError, NotFoundError
from .export_job_store import BaseExportJobStore, get_export_job_store
from .export_renderer import BaseExportRenderer, StorageLocationRenderer

logger = logging.getLogger(__name__)

# Running render tasks by job id; holds references until they finish.
_render_tasks: dict[str, asyncio.Task] = {}


async def begin_export(
    book_id: str,
    user_id: str,
    format: ExportFormat = ExportFormat.epub,
    settings: Optional[dict[str, Any]] = None,
    renderer: Optional[BaseExportRenderer] = None,
    store: Optional[BaseExportJobStore] = None,
) -> ExportJob:
    """Start exporting a book.

    Returns:
        The new job, still in ``processing``.

    Raises:
        NotFoundError: Book missing or not owned by ``user_id``.
        EmptyInputError: No chapter has any content yet.
    """
    if store is None:
        store = get_export_job_store()
    if renderer is None:
        renderer = StorageLocationRenderer()

    snapshot = await book_store.get_book_with_chapters(book_id, user_id)
    if not any(chapter.content.strip() for chapter in snapshot.chapters):
        raise EmptyInputError("Book has no chapter content to export")

    job = await store.create_job(book_id=book_id, format=format, settings=settings)
    logger.info(f"Starting {format.value} export job {job.id} for book {book_id}")

    task = asyncio.create_task(
        _render_task(job, snapshot, renderer, store),
        name=f"export_{job.id}",
    )
    _render_tasks[job.id] = task
    task.add_done_callback(lambda _: _render_tasks.pop(job.id, None))

    return job


async def _render_task(
    job: ExportJob,
    snapshot: BookWithChapters,
    renderer: BaseExportRenderer,
    store: BaseExportJobStore,
) -> None:
    """Run the renderer and move the job to its terminal status."""
    try:
        file_url = await renderer.render(job.id, snapshot, job.format, job.settings)
    except Exception as e:
        logger.exception(f"Export job {job.id} failed")
        await _record_failure(store, job.id, str(e) or type(e).__name__)
        return

    try:
        await store.complete(job.id, file_url)
    except Exception as e:
        logger.exception(f"Could not record completion of export job {job.id}")
        await _record_failure(store, job.id, f"Could not record export result: {e}")
        return
    logger.info(f"Export job {job.id} completed")


async def _record_failure(store: BaseExportJobStore, job_id: str, message: str) -> None:
    """Move a job to ``failed``; a store error here is logged and dropped."""
    try:
        await store.fail(job_id, message)
    except Exception:
        logger.exception(f"Could not record failure of export job {job_id}")


async def wait_for_export(job_id: str) -> None:
    """Wait for a job's render task, if it is still running."""
    task = _render_tasks.get(job_id)
    if task is not None:
        await asyncio.shield(task)


async def get_export_job(
    job_id: str,
    user_id: str,
    store: Optional[BaseExportJobStore] = None,
) -> ExportJob:
    """Get an export job whose book is owned by ``user_id``.

    Raises:
        NotFoundError: Unknown job, or its book belongs to someone else.
    """
    if store is None:
        store = get_export_job_store()
    job = await store.get_job(job_id)
    if job is None:
        raise NotFoundError("export job", job_id)
    try:
        await book_store.get_book(job.book_id, user_id)
    except NotFoundError:
        raise NotFoundError("export job", job_id) from None
    return job
