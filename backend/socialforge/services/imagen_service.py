"""
SocialForge Backend — Google Imagen Service (placeholder)
==========================================================

What:  Image generation for social posts.
How:   Until the Imagen 3 API is publicly callable this client produces a mock
       result: it resolves platform dimensions, builds the enhanced prompt the
       real call will send, waits a simulated latency and returns a
       placeholder image URL with metadata.
Who:   Composed by AIService, which calls it through a ResilientInvoker.
"""

import asyncio
import logging
import random
import time
from typing import Dict, Optional

from socialforge.config import Settings, settings as default_settings
from socialforge.schemas.generation import (
    AspectRatio,
    ImageGenerationOptions,
    ImageGenerationResult,
    ImageMetadata,
    ImageStyle,
    MediaDimensions,
    Platform,
)
from socialforge.services.llm_base import GenerativeService

logger = logging.getLogger(__name__)


def _dims(width: int, height: int) -> MediaDimensions:
    return MediaDimensions(width=width, height=height)


PLATFORM_DIMENSIONS: Dict[Platform, Dict[AspectRatio, MediaDimensions]] = {
    Platform.INSTAGRAM: {
        AspectRatio.SQUARE: _dims(1080, 1080),
        AspectRatio.PORTRAIT: _dims(1080, 1350),
        AspectRatio.LANDSCAPE: _dims(1080, 608),
    },
    Platform.TIKTOK: {
        AspectRatio.PORTRAIT: _dims(1080, 1920),
        AspectRatio.SQUARE: _dims(1080, 1080),
        AspectRatio.LANDSCAPE: _dims(1920, 1080),
    },
    Platform.YOUTUBE: {
        AspectRatio.LANDSCAPE: _dims(1920, 1080),
        AspectRatio.SQUARE: _dims(1080, 1080),
        AspectRatio.PORTRAIT: _dims(1080, 1920),
    },
    Platform.LINKEDIN: {
        AspectRatio.LANDSCAPE: _dims(1200, 627),
        AspectRatio.SQUARE: _dims(1080, 1080),
        AspectRatio.PORTRAIT: _dims(1080, 1350),
    },
    Platform.TWITTER: {
        AspectRatio.LANDSCAPE: _dims(1200, 675),
        AspectRatio.SQUARE: _dims(1080, 1080),
        AspectRatio.PORTRAIT: _dims(1080, 1350),
    },
}

DEFAULT_DIMENSIONS = _dims(1080, 1080)

STYLE_PROMPTS = {
    ImageStyle.PHOTOGRAPHIC: "high-quality photograph, professional lighting, sharp focus",
    ImageStyle.DIGITAL_ART: "digital artwork, vibrant colors, modern design",
    ImageStyle.ILLUSTRATION: "detailed illustration, clean lines, artistic style",
    ImageStyle.ANIME: "anime style artwork, detailed character design, vibrant colors",
}

PLATFORM_CONTEXT = {
    Platform.INSTAGRAM: "social media ready, eye-catching, trendy aesthetic",
    Platform.TIKTOK: "dynamic, energetic, youth-oriented, trending style",
    Platform.YOUTUBE: "thumbnail-worthy, clear focal point, engaging composition",
    Platform.LINKEDIN: "professional, clean, business-appropriate",
    Platform.TWITTER: "attention-grabbing, clear message, social media optimized",
}


def get_platform_dimensions(platform: str, aspect_ratio: Optional[AspectRatio] = None) -> MediaDimensions:
    """Pixel size for a platform/ratio; square when no ratio, 1080x1080 for unknown platforms."""
    try:
        table = PLATFORM_DIMENSIONS[Platform(platform)]
    except ValueError:
        return DEFAULT_DIMENSIONS
    return table.get(aspect_ratio or AspectRatio.SQUARE, table[AspectRatio.SQUARE])


def build_image_prompt(options: ImageGenerationOptions) -> str:
    return (
        f"{options.prompt}, {STYLE_PROMPTS[options.style]}, {PLATFORM_CONTEXT[options.platform]}, "
        "high resolution, professional quality, suitable for social media"
    )


class ImagenService(GenerativeService):
    """Imagen 3 client; generation is simulated until the API is available."""

    name = "imagen"

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    def is_configured(self) -> bool:
        return self.settings.has_google_api_key

    async def generate_image(self, options: ImageGenerationOptions) -> ImageGenerationResult:
        """
        Generate an image sized for the target platform.

        Returns:
            ImageGenerationResult with a placeholder URL and metadata.
        """
        dimensions = get_platform_dimensions(options.platform, options.aspect_ratio)
        enhanced_prompt = build_image_prompt(options)
        logger.debug(
            "Imagen mock generation %dx%d, prompt %d chars",
            dimensions.width,
            dimensions.height,
            len(enhanced_prompt),
        )
        return await self._mock_image_generation(dimensions)

    async def _mock_image_generation(self, dimensions: MediaDimensions) -> ImageGenerationResult:
        await asyncio.sleep(self.settings.media_simulated_latency)
        return ImageGenerationResult(
            success=True,
            image_url=(
                f"https://picsum.photos/{dimensions.width}/{dimensions.height}"
                f"?random={int(time.time() * 1000)}"
            ),
            metadata=ImageMetadata(
                width=dimensions.width,
                height=dimensions.height,
                format="jpeg",
                size=random.randint(100_000, 599_999),
            ),
        )

    async def health_check(self) -> bool:
        # No public endpoint to probe yet
        return self.is_configured()
