"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from ebook_studio import __version__
from ebook_studio.api.response import success_response
from ebook_studio.db import mongo

router = APIRouter(tags=["System"])

FEATURES = {
    "ai_interview": True,
    "blueprint_generation": True,
    "chapter_generation": True,
    "multi_format_export": True,
}


@router.get("/health")
async def health_check() -> dict:
    """Report service status; ``degraded`` when the database is unreachable."""
    database_ok = await mongo.ping()
    return success_response({
        "status": "healthy" if database_ok else "degraded",
        "service": "ebook-studio",
        "version": __version__,
        "database": "ok" if database_ok else "unavailable",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "features": FEATURES,
    })
