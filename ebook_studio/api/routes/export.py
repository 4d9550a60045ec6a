"""Export endpoints.

- POST /export: Start an export job
- GET /export/{job_id}: Check export status
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ebook_studio.api.deps import get_current_user_id
from ebook_studio.api.response import success_response
from ebook_studio.models import ExportRequest, ExportStartData
from ebook_studio.services import export_coordinator

router = APIRouter(prefix="/export", tags=["Export"])


@router.post("", status_code=202)
async def start_export(
    request: ExportRequest,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    """Start an export.

    Errors:
        - NOT_FOUND (404): Book not owned by the user
        - EMPTY_INPUT (400): No chapter has content yet
    """
    job = await export_coordinator.begin_export(
        request.book_id,
        user_id=user_id,
        format=request.format,
        settings=request.settings,
    )
    data = ExportStartData(export_id=job.id, status=job.status.value)
    return JSONResponse(status_code=202, content=success_response(data.model_dump()))


@router.get("/{job_id}")
async def get_export_status(job_id: str, user_id: str = Depends(get_current_user_id)) -> dict:
    """Get an export job's status and, once complete, its file URL."""
    job = await export_coordinator.get_export_job(job_id, user_id)
    return success_response(job.model_dump(mode="json"))
