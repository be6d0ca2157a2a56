"""
SocialForge Backend — Gemini Service Unit Tests (Mocked)
=========================================================

What:  Tests for GeminiService with the Google Generative AI SDK mocked.
How:   Patches the genai module and model to simulate success/failure.

What we test:
    ✅ Platform prompt building
    ✅ Successful generation returns trimmed text and token usage
    ✅ Empty/blocked responses return success=False
    ✅ SDK errors propagate (the invoker classifies them)
    ✅ Health check never raises
    ❌ Real API calls
"""

import pytest
from unittest.mock import patch, MagicMock, AsyncMock

from google.api_core import exceptions as google_exceptions

from socialforge.schemas.generation import ContentType, Platform, TextGenerationOptions
from socialforge.services.gemini_service import GeminiService, build_platform_prompt


def _response(text, usage=True):
    response = MagicMock()
    response.text = text
    if usage:
        response.usage_metadata = MagicMock(
            total_token_count=100,
            prompt_token_count=80,
            candidates_token_count=20,
        )
    else:
        response.usage_metadata = None
    return response


@pytest.fixture
def mocked_genai():
    with patch("socialforge.services.gemini_service.genai") as mock_genai:
        mock_model = MagicMock()
        mock_model.generate_content_async = AsyncMock()
        mock_genai.GenerativeModel.return_value = mock_model
        yield mock_genai


@pytest.fixture
def service(mocked_genai, test_settings):
    return GeminiService(test_settings)


class TestPlatformPrompt:

    def test_uses_platform_defaults(self):
        prompt = build_platform_prompt(
            TextGenerationOptions(prompt="Summer launch", platform=Platform.TWITTER)
        )
        assert 'Create a caption for twitter based on this topic: "Summer launch"' in prompt
        assert "Maximum length: 280 characters" in prompt
        assert "Use 1-3 relevant hashtags" in prompt
        assert prompt.endswith("Generate only the caption content, no additional explanations.")

    def test_max_length_override(self):
        prompt = build_platform_prompt(
            TextGenerationOptions(
                prompt="Hiring news",
                platform=Platform.LINKEDIN,
                content_type=ContentType.DESCRIPTION,
                max_length=500,
            )
        )
        assert "Create a description for linkedin" in prompt
        assert "Maximum length: 500 characters" in prompt
        assert "Tone: professional and thought-provoking" in prompt

    def test_blank_prompt_rejected(self):
        with pytest.raises(ValueError):
            TextGenerationOptions(prompt="   ", platform=Platform.INSTAGRAM)


class TestGeminiServiceMocked:

    def test_configures_sdk_and_model(self, mocked_genai, test_settings):
        GeminiService(test_settings)
        mocked_genai.configure.assert_called_once_with(api_key="test-key-not-real")
        args, kwargs = mocked_genai.GenerativeModel.call_args
        assert args[0] == test_settings.gemini_model
        assert kwargs["generation_config"]["max_output_tokens"] == 1024
        assert len(kwargs["safety_settings"]) == 4

    @pytest.mark.asyncio
    async def test_generate_content_success(self, service):
        service.model.generate_content_async.return_value = _response("  Sunny vibes ☀️ #summer  ")

        result = await service.generate_content(
            TextGenerationOptions(prompt="Summer", platform=Platform.INSTAGRAM)
        )

        assert result.success is True
        assert result.content == "Sunny vibes ☀️ #summer"
        assert result.usage.total_tokens == 100
        assert result.usage.prompt_tokens == 80
        assert result.usage.completion_tokens == 20

    @pytest.mark.asyncio
    async def test_empty_response_is_unsuccessful(self, service):
        service.model.generate_content_async.return_value = _response("", usage=False)

        result = await service.generate_content(
            TextGenerationOptions(prompt="Summer", platform=Platform.TIKTOK)
        )

        assert result.success is False
        assert result.error == "Empty response from Gemini API"

    @pytest.mark.asyncio
    async def test_none_response_is_unsuccessful(self, service):
        service.model.generate_content_async.return_value = None
        result = await service.complete("anything")
        assert result.success is False
        assert result.error == "No response received from Gemini API"

    @pytest.mark.asyncio
    async def test_sdk_errors_propagate(self, service):
        service.model.generate_content_async.side_effect = google_exceptions.ResourceExhausted("quota")

        with pytest.raises(google_exceptions.ResourceExhausted):
            await service.generate_content(
                TextGenerationOptions(prompt="Summer", platform=Platform.YOUTUBE)
            )

    @pytest.mark.asyncio
    async def test_generate_hashtags(self, service):
        service.model.generate_content_async.return_value = _response("#a #b #c")

        result = await service.generate_hashtags("Our new cafe opens Monday", Platform.LINKEDIN)

        assert result.content == "#a #b #c"
        sent_prompt = service.model.generate_content_async.call_args.args[0]
        assert 'linkedin content: "Our new cafe opens Monday"' in sent_prompt

    def test_is_configured(self, service):
        assert service.is_configured() is True

    @pytest.mark.asyncio
    async def test_health_check_returns_bool(self, mocked_genai, service):
        mocked_genai.list_models.return_value = [MagicMock()]
        assert await service.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_failure_returns_false(self, mocked_genai, service):
        mocked_genai.list_models.side_effect = RuntimeError("network down")
        assert await service.health_check() is False
