"""
Favorite Places AI Backend - Google Gemini Text Generator
==========================================================

What:  TextGenerator backed by the Google Gemini API.
How:   One generate_content_async call per prompt. Any failure, including a
       response with no usable text (blocked or empty candidate), becomes a
       GenerationError carrying the upstream message.
Who:   Created once by the dependency layer; called by AIService.

No retry or circuit breaking happens here. Bounded retry, when enabled,
is applied by AIService so that every caller sees the same failure shape.
"""

import logging
import time
import uuid
from typing import Any, Optional

import google.generativeai as genai

from places_ai.config import settings
from places_ai.exceptions import GenerationError
from places_ai.services.llm_base import TextGenerator

logger = logging.getLogger(__name__)


class GeminiTextGenerator(TextGenerator):
    """
    Google Gemini implementation of TextGenerator.

    The model object is created once and reused across requests; it holds no
    per-request state.
    """

    def __init__(self, model: Optional[Any] = None):
        # The SDK keeps auth in module-level state
        if settings.gemini_configured:
            genai.configure(api_key=settings.gemini_api_key)

        self.model = model or genai.GenerativeModel(settings.gemini_model)
        self.model_name = settings.gemini_model

        logger.info(
            "GeminiTextGenerator initialized with model=%s (configured=%s)",
            self.model_name,
            settings.gemini_configured,
        )

    def is_configured(self) -> bool:
        return settings.gemini_configured

    async def generate(self, prompt: str) -> str:
        call_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        request_options = {}
        if settings.gemini_request_timeout:
            request_options["timeout"] = settings.gemini_request_timeout

        try:
            response = await self.model.generate_content_async(
                prompt,
                request_options=request_options or None,
            )
            # .text raises ValueError when the candidate was blocked or empty
            text = response.text
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "[%s] Gemini call failed after %.0fms: %s",
                call_id,
                duration_ms,
                str(e),
            )
            raise GenerationError(
                upstream_message=str(e),
                context={"call_id": call_id, "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "[%s] Gemini call completed in %.0fms, %d prompt chars → %d response chars",
            call_id,
            duration_ms,
            len(prompt),
            len(text or ""),
        )
        return text or ""
