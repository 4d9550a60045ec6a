"""AI generation endpoints.

- POST /ai/blueprint: Synthesize a book blueprint from interview responses
- POST /ai/generate: Generate one chapter's content
"""

from fastapi import APIRouter, Depends

from ebook_studio.api.deps import get_current_user_id
from ebook_studio.api.response import success_response
from ebook_studio.models import (
    BlueprintRequest,
    ChapterGenerationData,
    ErrorDetail,
    GenerateChapterRequest,
)
from ebook_studio.services import blueprint_service, chapter_generation

router = APIRouter(prefix="/ai", tags=["AI"])


@router.post("/blueprint")
async def create_blueprint(
    request: BlueprintRequest,
    user_id: str = Depends(get_current_user_id),
) -> dict:
    """Synthesize a blueprint.

    Errors:
        - EMPTY_INPUT (400): No interview responses
        - MALFORMED_BLUEPRINT (500): Service output was not a valid blueprint
        - AI_SERVICE_UNAVAILABLE (503): Service unreachable or failing
    """
    blueprint = await blueprint_service.synthesize_blueprint(
        request.interview_responses,
        user_id=user_id,
    )
    return success_response(blueprint.model_dump(mode="json"))


@router.post("/generate")
async def generate_chapter(
    request: GenerateChapterRequest,
    user_id: str = Depends(get_current_user_id),
) -> dict:
    """Generate a chapter and save it as a draft.

    A failed save still returns the content, with ``saved: false`` and a
    ``persistence_warning`` so the client can retry the save.

    Errors:
        - NOT_FOUND (404): Book not owned by the user, or chapter not in book
        - CHAPTER_BUSY (409): Generation already running for this chapter
        - AI_SERVICE_UNAVAILABLE (503): Service unreachable or failing
    """
    result = await chapter_generation.generate_chapter(
        book_id=request.book_id,
        chapter_id=request.chapter_id,
        chapter_title=request.chapter_title,
        chapter_summary=request.chapter_summary,
        target_word_count=request.target_word_count,
        voice_profile=request.voice_profile,
        previous_chapter_summary=request.previous_chapter_summary,
        sections=request.sections,
        user_id=user_id,
    )

    warning = None
    if result.persistence_warning is not None:
        warning = ErrorDetail(
            code=result.persistence_warning.code,
            message=result.persistence_warning.message,
        )
    data = ChapterGenerationData(
        content=result.content,
        word_count=result.word_count,
        saved=result.saved,
        persistence_warning=warning,
    )
    return success_response(data.model_dump(mode="json"))
