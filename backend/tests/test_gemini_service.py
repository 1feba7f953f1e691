"""
Favorite Places AI Backend - Gemini Text Generator Tests (Mocked)
==================================================================

What:  Tests for GeminiTextGenerator with the Google Generative AI SDK mocked.
Why:   Tests must not make real API calls.

What we test:
    ✅ Successful call returns the model text
    ✅ SDK exceptions become GenerationError with the upstream message
    ✅ A blocked response (.text raises) becomes GenerationError
    ✅ Exactly one upstream call per generate() (no internal retry)
"""

from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import pytest

from places_ai.exceptions import GenerationError
from places_ai.services.gemini_service import GeminiTextGenerator


def _mock_model(response=None, error=None):
    model = MagicMock()
    if error is not None:
        model.generate_content_async = AsyncMock(side_effect=error)
    else:
        model.generate_content_async = AsyncMock(return_value=response)
    return model


class TestGeminiTextGenerator:

    @pytest.mark.asyncio
    async def test_generate_success(self):
        with patch("places_ai.services.gemini_service.genai"):
            response = MagicMock()
            response.text = '{"tags": ["cozy"]}'
            model = _mock_model(response=response)

            generator = GeminiTextGenerator(model=model)
            result = await generator.generate("Suggest tags")

            assert result == '{"tags": ["cozy"]}'
            model.generate_content_async.assert_awaited_once()
            assert model.generate_content_async.await_args.args[0] == "Suggest tags"

    @pytest.mark.asyncio
    async def test_sdk_error_wrapped_once(self):
        with patch("places_ai.services.gemini_service.genai"):
            model = _mock_model(error=RuntimeError("429 Resource has been exhausted"))
            generator = GeminiTextGenerator(model=model)

            with pytest.raises(GenerationError) as exc_info:
                await generator.generate("prompt")

            assert exc_info.value.upstream_message == "429 Resource has been exhausted"
            assert "429 Resource has been exhausted" in exc_info.value.message
            assert model.generate_content_async.await_count == 1

    @pytest.mark.asyncio
    async def test_blocked_response_wrapped(self):
        with patch("places_ai.services.gemini_service.genai"):
            response = MagicMock()
            type(response).text = PropertyMock(
                side_effect=ValueError("The response was blocked by safety filters")
            )
            generator = GeminiTextGenerator(model=_mock_model(response=response))

            with pytest.raises(GenerationError) as exc_info:
                await generator.generate("prompt")
            assert "blocked" in exc_info.value.upstream_message

    def test_configures_sdk_with_api_key(self):
        with patch("places_ai.services.gemini_service.genai") as mock_genai:
            generator = GeminiTextGenerator()

            mock_genai.configure.assert_called_once_with(api_key="test-key-not-real")
            mock_genai.GenerativeModel.assert_called_once()
            assert generator.is_configured() is True
