"""
SocialForge Backend — AI Service Facade Tests
==============================================

What:  Tests that the facade routes every call through the invoker with the
       right service label, surfaces classified errors, and reports status.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import status_error
from socialforge.exceptions import AIServiceError, ErrorKind
from socialforge.main import create_ai_service
from socialforge.schemas.generation import (
    ImageGenerationOptions,
    Platform,
    TextGenerationOptions,
    TextGenerationResult,
    VideoGenerationOptions,
)
from socialforge.services.ai_service import AIService
from socialforge.services.imagen_service import ImagenService
from socialforge.services.resilience import ResilientInvoker
from socialforge.services.veo_service import VeoService


@pytest.fixture
def gemini():
    mock = MagicMock()
    mock.generate_content = AsyncMock()
    mock.generate_hashtags = AsyncMock()
    mock.complete = AsyncMock()
    mock.is_configured.return_value = True
    return mock


@pytest.fixture
def ai_service(invoker, gemini, test_settings):
    return AIService(
        invoker,
        gemini=gemini,
        imagen=ImagenService(test_settings),
        veo=VeoService(test_settings),
    )


class TestGeneration:

    @pytest.mark.asyncio
    async def test_generate_text_success(self, ai_service, gemini, observer):
        expected = TextGenerationResult(success=True, content="Generated text")
        gemini.generate_content.return_value = expected

        result = await ai_service.generate_text(
            TextGenerationOptions(prompt="Test prompt", platform=Platform.INSTAGRAM),
            user_id=123,
            request_id="req-456",
        )

        assert result == expected
        assert gemini.generate_content.await_count == 1
        request = observer.events[0][1]
        assert request == {"service": "gemini", "user_id": 123,
                           "request_id": "req-456", "prompt": "Test prompt"}
        assert observer.names() == ["request", "success"]

    @pytest.mark.asyncio
    async def test_generate_text_retries_server_errors(self, ai_service, gemini, recorded_sleeps):
        error = status_error("Server error", 500)
        expected = TextGenerationResult(success=True, content="Generated text")
        gemini.generate_content.side_effect = [error, error, expected]

        result = await ai_service.generate_text(
            TextGenerationOptions(prompt="Test prompt", platform=Platform.INSTAGRAM)
        )

        assert result == expected
        assert gemini.generate_content.await_count == 3
        assert len(recorded_sleeps) == 2

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, ai_service, gemini):
        gemini.generate_content.side_effect = status_error("Bad request", 400)

        with pytest.raises(AIServiceError) as exc_info:
            await ai_service.generate_text(
                TextGenerationOptions(prompt="Test prompt", platform=Platform.INSTAGRAM)
            )

        assert exc_info.value.kind == ErrorKind.CLIENT_ERROR
        assert exc_info.value.message == "gemini client error: Bad request"
        assert gemini.generate_content.await_count == 1

    @pytest.mark.asyncio
    async def test_generate_hashtags_label_and_descriptor(self, ai_service, gemini, observer):
        gemini.generate_hashtags.return_value = TextGenerationResult(success=True, content="#coffee")
        content = "A" * 150

        await ai_service.generate_hashtags(content, "tiktok")

        gemini.generate_hashtags.assert_awaited_once_with(content, Platform.TIKTOK)
        request = observer.events[0][1]
        assert request["service"] == "gemini-hashtags"
        assert request["prompt"] == "Generate hashtags for tiktok: " + "A" * 100

    @pytest.mark.asyncio
    async def test_quota_error_surfaces_distinctly(self, ai_service, gemini):
        gemini.generate_hashtags.side_effect = Exception("Quota exceeded")

        with pytest.raises(AIServiceError) as exc_info:
            await ai_service.generate_hashtags("post", Platform.TWITTER)

        error = exc_info.value
        assert error.kind == ErrorKind.QUOTA_EXCEEDED
        assert error.service == "gemini-hashtags"
        assert error.to_dict()["error"] == "QUOTA_EXCEEDED"
        assert gemini.generate_hashtags.await_count == 1

    @pytest.mark.asyncio
    async def test_generate_image_through_invoker(self, ai_service, observer):
        result = await ai_service.generate_image(
            ImageGenerationOptions(prompt="Latte art", platform=Platform.YOUTUBE)
        )
        assert result.success is True
        assert observer.events[0][1]["service"] == "imagen"

    @pytest.mark.asyncio
    async def test_generate_video_through_invoker(self, ai_service, observer):
        result = await ai_service.generate_video(
            VideoGenerationOptions(prompt="Demo", platform=Platform.YOUTUBE, duration=30)
        )
        assert result.metadata.duration == 30
        assert observer.events[0][1]["service"] == "veo"


class TestServiceStatus:

    def test_reports_configuration(self, ai_service):
        status = ai_service.get_service_status()
        assert status.gemini.configured is True
        assert status.gemini.available is True
        assert status.imagen.configured is True
        assert status.imagen.available is False
        assert status.veo.available is False


class TestValidateContent:

    @pytest.mark.asyncio
    async def test_safe(self, ai_service, gemini):
        gemini.complete.return_value = TextGenerationResult(success=True, content="SAFE")
        verdict = await ai_service.validate_content("Morning coffee!")
        assert verdict.safe is True
        assert verdict.reason is None

    @pytest.mark.asyncio
    async def test_unsafe_with_reason(self, ai_service, gemini):
        gemini.complete.return_value = TextGenerationResult(success=True, content="UNSAFE: violent language")
        verdict = await ai_service.validate_content("...")
        assert verdict.safe is False
        assert verdict.reason == "VIOLENT LANGUAGE"

    @pytest.mark.asyncio
    async def test_inconclusive_answer_defaults_to_safe(self, ai_service, gemini):
        gemini.complete.return_value = TextGenerationResult(success=True, content="Maybe?")
        assert (await ai_service.validate_content("...")).safe is True

    @pytest.mark.asyncio
    async def test_failed_check_defaults_to_safe(self, ai_service, gemini):
        gemini.complete.side_effect = RuntimeError("network down")
        assert (await ai_service.validate_content("...")).safe is True


class TestBootstrap:

    def test_create_ai_service_wires_settings(self, test_settings):
        with patch("socialforge.services.gemini_service.genai"):
            service = create_ai_service(test_settings, configure_logging=False)

        assert isinstance(service.invoker, ResilientInvoker)
        assert service.invoker.config == test_settings.invocation_config()
        assert service.imagen.settings is test_settings

    def test_missing_key_is_logged_not_raised(self, test_settings, caplog):
        settings = test_settings.model_copy(update={"gemini_api_key": ""})
        with patch("socialforge.services.gemini_service.genai"):
            service = create_ai_service(settings, configure_logging=False)

        assert service.get_service_status().gemini.configured is False
        assert "GEMINI_API_KEY is not set" in caplog.text
