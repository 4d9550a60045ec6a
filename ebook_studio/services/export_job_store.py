"""Export job persistence.

``MongoExportJobStore`` is the durable default; ``InMemoryExportJobStore``
serves tests and single-process runs.

Both enforce the export state machine: jobs are created in ``processing``
and may move once, to ``complete`` or ``failed``. Terminal jobs never change.
"""

from __future__ import annotations

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from ebook_studio.models import ExportFormat, ExportJob, ExportJobStatus

from .errors import InvalidTransitionError, NotFoundError

logger = logging.getLogger(__name__)

EXPORT_JOBS_COLLECTION = "export_jobs"


def _new_job(book_id: str, format: ExportFormat, settings: Optional[dict[str, Any]]) -> ExportJob:
    return ExportJob(
        id=str(uuid4()),
        book_id=book_id,
        format=format,
        settings=dict(settings or {}),
        status=ExportJobStatus.processing,
        created_at=datetime.now(timezone.utc),
    )


def _apply_transition(
    job: ExportJob,
    status: ExportJobStatus,
    file_url: Optional[str],
    error_message: Optional[str],
) -> ExportJob:
    """Return ``job`` moved to ``status``, or raise if not allowed."""
    if not job.can_transition_to(status):
        raise InvalidTransitionError(job.id, job.status.value, status.value)

    updated = job.model_copy(deep=True)
    updated.status = status
    updated.status_history.append(status)
    updated.completed_at = datetime.now(timezone.utc)
    if status == ExportJobStatus.complete:
        updated.file_url = file_url
    else:
        updated.error_message = error_message
    return updated


class BaseExportJobStore(ABC):
    """Abstract base class for export job stores."""

    @abstractmethod
    async def create_job(
        self,
        book_id: str,
        format: ExportFormat = ExportFormat.epub,
        settings: Optional[dict[str, Any]] = None,
    ) -> ExportJob:
        """Create a new job in ``processing``."""
        pass

    @abstractmethod
    async def get_job(self, job_id: str) -> Optional[ExportJob]:
        """Get a job by ID."""
        pass

    @abstractmethod
    async def transition(
        self,
        job_id: str,
        status: ExportJobStatus,
        file_url: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> ExportJob:
        """Move a job to a terminal status.

        Raises:
            NotFoundError: Unknown job.
            InvalidTransitionError: The state machine forbids the change.
        """
        pass

    @abstractmethod
    async def list_jobs(self, book_id: str, limit: int = 100) -> list[ExportJob]:
        """List a book's jobs, newest first."""
        pass

    async def complete(self, job_id: str, file_url: str) -> ExportJob:
        return await self.transition(job_id, ExportJobStatus.complete, file_url=file_url)

    async def fail(self, job_id: str, error_message: str) -> ExportJob:
        return await self.transition(job_id, ExportJobStatus.failed, error_message=error_message)


class InMemoryExportJobStore(BaseExportJobStore):
    """In-memory export job store.

    Safe for concurrent tasks via an asyncio lock. Jobs are lost on restart.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, ExportJob] = {}
        self._lock = asyncio.Lock()

    async def create_job(
        self,
        book_id: str,
        format: ExportFormat = ExportFormat.epub,
        settings: Optional[dict[str, Any]] = None,
    ) -> ExportJob:
        job = _new_job(book_id, format, settings)
        async with self._lock:
            self._jobs[job.id] = job
        logger.debug(f"Created export job {job.id}")
        return job.model_copy(deep=True)

    async def get_job(self, job_id: str) -> Optional[ExportJob]:
        async with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job else None

    async def transition(
        self,
        job_id: str,
        status: ExportJobStatus,
        file_url: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> ExportJob:
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise NotFoundError("export job", job_id)
            updated = _apply_transition(job, status, file_url, error_message)
            self._jobs[job_id] = updated
            return updated.model_copy(deep=True)

    async def list_jobs(self, book_id: str, limit: int = 100) -> list[ExportJob]:
        async with self._lock:
            jobs = [j for j in self._jobs.values() if j.book_id == book_id]
            jobs.sort(key=lambda j: j.created_at, reverse=True)
            return [j.model_copy(deep=True) for j in jobs[:limit]]

    def __len__(self) -> int:
        return len(self._jobs)


def _to_document(job: ExportJob) -> dict:
    doc = job.model_dump(mode="json", exclude={"id", "created_at", "completed_at"})
    doc["_id"] = job.id
    doc["created_at"] = job.created_at
    doc["completed_at"] = job.completed_at
    return doc


def _from_document(doc: dict) -> ExportJob:
    data = {key: value for key, value in doc.items() if key != "_id"}
    data.setdefault("status_history", [doc["status"]])
    return ExportJob(id=doc["_id"], **data)


class MongoExportJobStore(BaseExportJobStore):
    """Durable export job store.

    A transition is one ``update_one`` filtered on the status the job was
    read in; when two writers race only the first matches.
    """

    def __init__(self) -> None:
        self._indexes_ready = False

    async def _jobs(self):
        from ebook_studio.db.mongo import get_database
        db = await get_database()
        return db[EXPORT_JOBS_COLLECTION]

    async def ensure_indexes(self) -> None:
        """Index jobs by book and status (once per store)."""
        if self._indexes_ready:
            return
        try:
            jobs = await self._jobs()
            await jobs.create_index([("book_id", 1), ("created_at", -1)])
            await jobs.create_index("status")
            self._indexes_ready = True
        except Exception as e:
            logger.warning(f"Could not create export job indexes: {e}")

    async def create_job(
        self,
        book_id: str,
        format: ExportFormat = ExportFormat.epub,
        settings: Optional[dict[str, Any]] = None,
    ) -> ExportJob:
        await self.ensure_indexes()
        job = _new_job(book_id, format, settings)
        await (await self._jobs()).insert_one(_to_document(job))
        logger.debug(f"Stored export job {job.id}")
        return job

    async def get_job(self, job_id: str) -> Optional[ExportJob]:
        doc = await (await self._jobs()).find_one({"_id": job_id})
        return _from_document(doc) if doc else None

    async def transition(
        self,
        job_id: str,
        status: ExportJobStatus,
        file_url: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> ExportJob:
        current = await self.get_job(job_id)
        if current is None:
            raise NotFoundError("export job", job_id)
        updated = _apply_transition(current, status, file_url, error_message)

        changes = _to_document(updated)
        for key in ("_id", "book_id", "format", "settings", "created_at"):
            changes.pop(key)
        result = await (await self._jobs()).update_one(
            {"_id": job_id, "status": current.status.value},
            {"$set": changes},
        )
        if result.matched_count == 0:
            # Another writer moved the job first
            latest = await self.get_job(job_id)
            raise InvalidTransitionError(
                job_id,
                latest.status.value if latest else current.status.value,
                status.value,
            )
        return updated

    async def list_jobs(self, book_id: str, limit: int = 100) -> list[ExportJob]:
        cursor = (await self._jobs()).find({"book_id": book_id}).sort("created_at", -1).limit(limit)
        return [_from_document(doc) for doc in await cursor.to_list(length=limit)]


_default_store: Optional[BaseExportJobStore] = None


def get_export_job_store() -> BaseExportJobStore:
    """Process-wide export job store.

    JOB_STORE_BACKEND picks "mongo" (default) or "memory".
    """
    global _default_store
    if _default_store is None:
        backend = os.getenv("JOB_STORE_BACKEND", "mongo").lower()
        _default_store = InMemoryExportJobStore() if backend == "memory" else MongoExportJobStore()
        logger.info(f"Export jobs stored in {backend}")
    return _default_store


def set_export_job_store(store: Optional[BaseExportJobStore]) -> None:
    """Replace the export job store (for testing)."""
    global _default_store
    _default_store = store
