"""
Favorite Places AI Backend - FastAPI Dependencies
==================================================

What:  Providers injected into route handlers with Depends().
How:   get_ai_service builds the AIService once (first request) and reuses
       it; tests replace it through app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Request

from places_ai.services.ai_service import AIService
from places_ai.services.gemini_service import GeminiTextGenerator
from places_ai.services.vision_service import build_signal_extractor


@lru_cache(maxsize=1)
def get_ai_service() -> AIService:
    return AIService(
        generator=GeminiTextGenerator(),
        signal_extractor=build_signal_extractor(),
    )


def get_caller_id(request: Request) -> str:
    """
    Identity of the caller, for log lines only.

    Upstream auth middleware may attach `request.state.user_id`; otherwise the
    X-User-Id header is used. Never used for authorization.
    """
    user_id = getattr(request.state, "user_id", None)
    return user_id or request.headers.get("X-User-Id") or "anonymous"
