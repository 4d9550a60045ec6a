"""Pytest fixtures for testing."""

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from ebook_studio.api.main import app
from ebook_studio.db import mongo
from ebook_studio.llm import GenerationClient, GenerationConfig, GenerationResponse, Usage
from ebook_studio.llm import client as llm_client
from ebook_studio.models import Blueprint
from ebook_studio.services.chapter_lease import ChapterLeaseRegistry, set_lease_registry
from ebook_studio.services.export_job_store import InMemoryExportJobStore, set_export_job_store

TEST_USER = "user-123"


def _make_response(text: str, model: str = "test-model", usage: Usage | None = None) -> GenerationResponse:
    """Create a GenerationResponse for testing."""
    return GenerationResponse(
        text=text,
        usage=usage if usage is not None else Usage(input_tokens=120, output_tokens=880),
        model=model,
        provider="anthropic",
        finish_reason="end_turn",
        latency_ms=100,
    )


def _make_client(text: str | None = None, side_effect: Any = None) -> GenerationClient:
    """GenerationClient backed by a mock provider.

    ``text`` sets a fixed response; ``side_effect`` is passed to the mock
    provider's generate (an exception, a list, or a callable taking the request).
    """
    provider = AsyncMock()
    provider.name = "anthropic"
    if side_effect is not None:
        provider.generate = AsyncMock(side_effect=side_effect)
    else:
        provider.generate = AsyncMock(return_value=_make_response(text or ""))
    return GenerationClient(GenerationConfig(api_key="test-key"), provider=provider)


@pytest_asyncio.fixture
async def mock_db() -> AsyncGenerator[Any, None]:
    """Provide a mock MongoDB database for testing."""
    mock_client = AsyncMongoMockClient()
    mock_database = mock_client[mongo.DATABASE_NAME]

    # Replace the real client with mock
    mongo.set_client(mock_client)

    yield mock_database

    mongo.set_client(None)


@pytest.fixture(autouse=True)
def isolated_state():
    """Fresh in-memory export store and lease registry per test."""
    store = InMemoryExportJobStore()
    set_export_job_store(store)
    set_lease_registry(ChapterLeaseRegistry())
    yield
    set_export_job_store(None)
    set_lease_registry(None)
    llm_client.set_client(None)


@pytest_asyncio.fixture
async def client(mock_db: Any) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-User-Id": TEST_USER}


@pytest.fixture
def blueprint_data() -> dict[str, Any]:
    """A valid blueprint document as the service would return it."""
    return {
        "title": "The Quiet Engine",
        "subtitle_options": [
            "How Small Habits Power Big Careers",
            "A Field Guide to Sustainable Ambition",
        ],
        "description": "A practical guide to building a career on steady habits.",
        "target_audience": "Mid-career professionals feeling stuck",
        "book_type": "nonfiction",
        "target_word_count": 45000,
        "tone": "Warm, direct, and evidence-based",
        "chapters": [
            {
                "title": "The Myth of the Big Break",
                "summary": "Why careers are built in small increments.",
                "target_word_count": 4500,
                "sections": [
                    {"title": "Lottery Thinking", "summary": "The appeal of the big break.", "target_word_count": 1500},
                    {"title": "Compounding", "summary": "Small gains add up.", "target_word_count": 1500},
                ],
            },
            {
                "title": "Designing a Daily System",
                "summary": "Turning goals into routines.",
                "target_word_count": 5000,
                "sections": [
                    {"title": "Inputs over Outputs", "summary": "Measure what you control.", "target_word_count": 2000},
                ],
            },
            {
                "title": "Staying the Course",
                "summary": "Handling plateaus and setbacks.",
                "target_word_count": 4000,
                "sections": [],
            },
        ],
        "research_needs": ["Habit formation studies"],
        "media_requirements": ["One diagram per chapter"],
        "estimated_credits": 300,
    }


@pytest.fixture
def blueprint(blueprint_data: dict[str, Any]) -> Blueprint:
    return Blueprint.model_validate(blueprint_data)


@pytest.fixture
def make_response():
    """Factory for GenerationResponse objects."""
    return _make_response


@pytest.fixture
def make_client():
    """Factory for GenerationClients backed by a mock provider."""
    return _make_client
