"""
SocialForge Backend — AI Service Facade
========================================

What:  Single entry point for caption, hashtag, image and video generation.
How:   Every provider call goes through ResilientInvoker.invoke() with a
       service label (gemini, gemini-hashtags, imagen, veo) so failures are
       timed out, classified, retried and logged uniformly.
Who:   Built once per process by the entry point (AIService.from_settings)
       and passed to whatever needs it. There is no module-level instance.

Error Handling Chain:
    SDK raises → classify_error() → retryable? → backoff and retry
    → attempts exhausted or fatal kind → AIServiceError reaches the caller
"""

import logging
from typing import Optional

from socialforge.config import Settings, settings as default_settings
from socialforge.schemas.generation import (
    ContentSafetyVerdict,
    ImageGenerationOptions,
    ImageGenerationResult,
    Platform,
    ServiceAvailability,
    ServiceStatus,
    TextGenerationOptions,
    TextGenerationResult,
    VideoGenerationOptions,
    VideoGenerationResult,
)
from socialforge.services.gemini_service import GeminiService
from socialforge.services.imagen_service import ImagenService
from socialforge.services.resilience import ResilientInvoker
from socialforge.services.veo_service import VeoService

logger = logging.getLogger(__name__)

SAFETY_PROMPT = (
    'Analyze this content for safety and appropriateness: "{content}". '
    'Respond with only "SAFE" or "UNSAFE: [reason]"'
)


class AIService:
    """
    Facade over the generative clients, with resilience applied to each call.

    Args:
        invoker:  Retry/timeout policy shared by all calls of this facade
        gemini:   Text client (built from settings when omitted)
        imagen:   Image client (built from settings when omitted)
        veo:      Video client (built from settings when omitted)
    """

    def __init__(
        self,
        invoker: ResilientInvoker,
        gemini: Optional[GeminiService] = None,
        imagen: Optional[ImagenService] = None,
        veo: Optional[VeoService] = None,
    ):
        self.invoker = invoker
        self.gemini = gemini or GeminiService()
        self.imagen = imagen or ImagenService()
        self.veo = veo or VeoService()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AIService":
        """Build the invoker and all clients from one Settings object."""
        settings = settings or default_settings
        return cls(
            invoker=ResilientInvoker(settings.invocation_config()),
            gemini=GeminiService(settings),
            imagen=ImagenService(settings),
            veo=VeoService(settings),
        )

    async def generate_text(
        self,
        options: TextGenerationOptions,
        user_id: Optional[int] = None,
        request_id: Optional[str] = None,
    ) -> TextGenerationResult:
        """Generate a caption/description with Gemini."""
        return await self.invoker.invoke(
            lambda: self.gemini.generate_content(options),
            "gemini",
            user_id=user_id,
            request_id=request_id,
            prompt=options.prompt,
        )

    async def generate_hashtags(
        self,
        content: str,
        platform: Platform,
        user_id: Optional[int] = None,
        request_id: Optional[str] = None,
    ) -> TextGenerationResult:
        """Suggest hashtags for existing content."""
        platform = Platform(platform)
        return await self.invoker.invoke(
            lambda: self.gemini.generate_hashtags(content, platform),
            "gemini-hashtags",
            user_id=user_id,
            request_id=request_id,
            prompt=f"Generate hashtags for {platform.value}: {content[:100]}",
        )

    async def generate_image(
        self,
        options: ImageGenerationOptions,
        user_id: Optional[int] = None,
        request_id: Optional[str] = None,
    ) -> ImageGenerationResult:
        return await self.invoker.invoke(
            lambda: self.imagen.generate_image(options),
            "imagen",
            user_id=user_id,
            request_id=request_id,
            prompt=options.prompt,
        )

    async def generate_video(
        self,
        options: VideoGenerationOptions,
        user_id: Optional[int] = None,
        request_id: Optional[str] = None,
    ) -> VideoGenerationResult:
        return await self.invoker.invoke(
            lambda: self.veo.generate_video(options),
            "veo",
            user_id=user_id,
            request_id=request_id,
            prompt=options.prompt,
        )

    def get_service_status(self) -> ServiceStatus:
        """
        Configuration and availability per provider.

        Imagen and Veo report available=False until their public APIs replace
        the mock generators.
        """
        return ServiceStatus(
            gemini=ServiceAvailability(configured=self.gemini.is_configured(), available=True),
            imagen=ServiceAvailability(configured=self.imagen.is_configured(), available=False),
            veo=ServiceAvailability(configured=self.veo.is_configured(), available=False),
        )

    async def validate_content(self, content: str) -> ContentSafetyVerdict:
        """
        Ask Gemini whether ``content`` is safe to publish.

        Fails open: an inconclusive answer or a failed check yields safe=True.
        This is a single direct call, not routed through the invoker.
        """
        try:
            response = await self.gemini.complete(SAFETY_PROMPT.format(content=content))
        except Exception as e:
            logger.warning("Content validation error: %s", str(e))
            return ContentSafetyVerdict(safe=True)

        if response.success and response.content:
            verdict = response.content.strip().upper()
            if verdict.startswith("SAFE"):
                return ContentSafetyVerdict(safe=True)
            if verdict.startswith("UNSAFE:"):
                return ContentSafetyVerdict(safe=False, reason=verdict[len("UNSAFE:"):].strip())

        return ContentSafetyVerdict(safe=True)
