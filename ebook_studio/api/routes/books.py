"""Book endpoints: materialization and reads."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ebook_studio.api.deps import get_current_user_id
from ebook_studio.api.response import success_response
from ebook_studio.models import (
    BookWithChapters,
    MaterializeRequest,
    ResumeMaterializationRequest,
    UpdateBookRequest,
)
from ebook_studio.services import book_store, materializer

router = APIRouter(prefix="/books", tags=["Books"])


def _book_payload(result: BookWithChapters) -> dict:
    return {
        "book": result.book.model_dump(mode="json"),
        "chapters": [chapter.model_dump(mode="json") for chapter in result.chapters],
        "total_word_count": result.total_word_count,
    }


@router.post("", status_code=201)
async def create_book(
    request: MaterializeRequest,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    """Materialize an accepted blueprint into a book with chapters."""
    result = await materializer.materialize(
        request.blueprint,
        owner=user_id,
        selected_subtitle_index=request.selected_subtitle_index,
        voice_profile=request.voice_profile,
    )
    return JSONResponse(status_code=201, content=success_response(_book_payload(result)))


@router.get("")
async def list_books(user_id: str = Depends(get_current_user_id)) -> dict:
    """List the user's books."""
    books = await book_store.list_books(user_id)
    return success_response([book.model_dump(mode="json") for book in books])


@router.get("/{book_id}")
async def get_book(book_id: str, user_id: str = Depends(get_current_user_id)) -> dict:
    """Get a book with its chapters in manuscript order."""
    result = await book_store.get_book_with_chapters(book_id, user_id)
    return success_response(_book_payload(result))


@router.patch("/{book_id}")
async def update_book(
    book_id: str,
    request: UpdateBookRequest,
    user_id: str = Depends(get_current_user_id),
) -> dict:
    """Edit book metadata."""
    book = await book_store.update_book_metadata(book_id, user_id, request)
    return success_response(book.model_dump(mode="json"))


@router.delete("/{book_id}")
async def delete_book(book_id: str, user_id: str = Depends(get_current_user_id)) -> dict:
    """Discard a book none of whose chapters has been written yet."""
    await book_store.delete_book(book_id, user_id)
    return success_response({"deleted": True})


@router.post("/{book_id}/chapters/resume")
async def resume_chapters(
    book_id: str,
    request: ResumeMaterializationRequest,
    user_id: str = Depends(get_current_user_id),
) -> dict:
    """Create the chapters that failed during materialization."""
    result = await materializer.resume_materialization(
        book_id, owner=user_id, failed_indices=request.failed_indices
    )
    return success_response(_book_payload(result))
