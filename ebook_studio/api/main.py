"""FastAPI application setup."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Configuration comes from the environment; .env is for local runs
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ConnectionFailure

from ebook_studio import __version__
from ebook_studio.api.exceptions import PIPELINE_ERROR_STATUS, UnauthorizedError
from ebook_studio.api.response import error_response
from ebook_studio.api.routes import ai, books, export, health
from ebook_studio.db.mongo import close_database
from ebook_studio.llm import GenerationError
from ebook_studio.services import book_store
from ebook_studio.services.errors import PartialMaterializationError, PipelineError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create indexes on startup and close the client on shutdown."""
    # Startup
    await book_store.ensure_indexes()
    yield
    # Shutdown
    await close_database()


app = FastAPI(
    title="eBook Studio API",
    description="Interview-to-manuscript generation backend",
    version=__version__,
    lifespan=lifespan,
)

# Frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError) -> JSONResponse:
    """Handle missing identity."""
    return JSONResponse(
        status_code=401,
        content=error_response("UNAUTHORIZED", exc.message),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle malformed request bodies."""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg', 'invalid')}" if location else "Invalid request"
    return JSONResponse(
        status_code=400,
        content=error_response("VALIDATION_ERROR", message),
    )


@app.exception_handler(PartialMaterializationError)
async def partial_materialization_handler(
    request: Request, exc: PartialMaterializationError
) -> JSONResponse:
    """Report which chapters exist so the client can resume or discard."""
    recovery = {
        "book_id": exc.book_id,
        "created_chapter_ids": exc.created_chapter_ids,
        "failed_indices": exc.failed_indices,
    }
    return JSONResponse(
        status_code=500,
        content=error_response(exc.code, exc.message, data=recovery),
    )


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    """Handle expected pipeline failures."""
    status_code = next(
        (status for cls, status in PIPELINE_ERROR_STATUS.items() if isinstance(exc, cls)),
        500,
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response(exc.code, exc.message),
    )


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    """Handle text-generation service failures."""
    return JSONResponse(
        status_code=503,
        content=error_response("AI_SERVICE_UNAVAILABLE", "AI service unavailable. Please try again."),
    )


@app.exception_handler(ConnectionFailure)
async def database_unavailable_handler(request: Request, exc: ConnectionFailure) -> JSONResponse:
    """Unreachable MongoDB, including server selection timeouts."""
    logger.error(f"Database unavailable: {exc}")
    return JSONResponse(
        status_code=503,
        content=error_response("DATABASE_UNAVAILABLE", "Database is not available. Please try again later."),
    )


# Register routes
app.include_router(health.router)
app.include_router(ai.router, prefix="/api")
app.include_router(books.router, prefix="/api")
app.include_router(export.router, prefix="/api")
