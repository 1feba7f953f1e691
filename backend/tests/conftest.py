"""
Favorite Places AI Backend - Test Configuration (conftest.py)
==============================================================

What:  Shared pytest fixtures for the suite.
How:   pytest auto-discovers this file. No test talks to Gemini or Vision:
       the generator and signal extractor are replaced with stubs.

Function-scoped fixtures:
    ├── stub_generator:   StubGenerator with a canned reply, records prompts
    ├── stub_extractor:   StubSignalExtractor returning a fixed ImageSignal
    ├── ai_service:       AIService wired to both stubs (single attempt)
    └── test_client:      HTTPX AsyncClient with get_ai_service overridden
"""

import os
from typing import List, Optional

# Set before any places_ai import so the settings singleton picks them up
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["VISION_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from places_ai.exceptions import GenerationError
from places_ai.schemas.ai import ImageSignal
from places_ai.services.ai_service import AIService
from places_ai.services.llm_base import TextGenerator
from places_ai.services.vision_service import ImageSignalExtractor


class StubGenerator(TextGenerator):
    """
    Returns queued replies in order (the last one repeats) and records every prompt.

    A queued exception instance is raised instead of returned.
    """

    def __init__(self, *replies):
        self.replies = list(replies) or ['{"tags": []}']
        self.prompts: List[str] = []

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        index = min(len(self.prompts), len(self.replies)) - 1
        reply = self.replies[index]
        if isinstance(reply, Exception):
            raise reply
        return reply

    def is_configured(self) -> bool:
        return True


class StubSignalExtractor(ImageSignalExtractor):
    def __init__(self, signal: Optional[ImageSignal] = None):
        self.signal = signal
        self.urls: List[str] = []

    async def extract(self, photo_url: str) -> Optional[ImageSignal]:
        self.urls.append(photo_url)
        return self.signal


@pytest.fixture
def stub_generator():
    return StubGenerator(
        '{"whyILikedIt": "Great coffee", "tips": "Go early", "bestTimeToGo": "Weekday mornings"}'
    )


@pytest.fixture
def sample_signal():
    return ImageSignal(
        labels=["Cafe", "Coffee", "Interior design"],
        landmarks=[],
        dominant_color_shares=["42%", "21%", "9%"],
    )


@pytest.fixture
def stub_extractor(sample_signal):
    return StubSignalExtractor(sample_signal)


@pytest.fixture
def ai_service(stub_generator, stub_extractor):
    return AIService(
        generator=stub_generator,
        signal_extractor=stub_extractor,
        max_attempts=1,
        restrict_search_ids=False,
    )


@pytest.fixture
def sample_places():
    return [
        {
            "id": "place-1",
            "title": "Trattoria Roma",
            "category": "restaurant",
            "tags": ["italian", "cozy"],
            "notes": "Best homemade pasta I've had outside Italy. Carbonara was perfect.",
        },
        {
            "id": "place-2",
            "title": "Sunset Point",
            "category": "viewpoint",
            "tags": ["scenic", "outdoor"],
            "notes": "Amazing views at golden hour.",
        },
    ]


@pytest_asyncio.fixture
async def test_client(ai_service):
    """
    HTTPX AsyncClient talking to the app in-process through ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from places_ai.dependencies import get_ai_service
    from places_ai.main import create_app

    app = create_app()
    app.dependency_overrides[get_ai_service] = lambda: ai_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def generation_failure(message: str = "503 Service Unavailable") -> GenerationError:
    return GenerationError(upstream_message=message)
