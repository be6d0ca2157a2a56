"""
SocialForge Backend — Google Veo Service (placeholder)
=======================================================

What:  Short-form video generation for social posts.
How:   Mock implementation until the Veo API is publicly callable: resolves
       the platform's video specs, builds the enhanced prompt, caps the
       requested duration at the platform maximum and returns placeholder
       video and thumbnail URLs.
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
    GenerationStatus,
    Platform,
    VideoGenerationOptions,
    VideoGenerationResult,
    VideoMetadata,
    VideoSpecs,
    VideoStyle,
)
from socialforge.services.llm_base import GenerativeService

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 15


def _specs(width: int, height: int, max_duration: int) -> VideoSpecs:
    return VideoSpecs(width=width, height=height, max_duration=max_duration, fps=30)


PLATFORM_VIDEO_SPECS: Dict[Platform, Dict[AspectRatio, VideoSpecs]] = {
    Platform.INSTAGRAM: {
        AspectRatio.SQUARE: _specs(1080, 1080, 60),
        AspectRatio.PORTRAIT: _specs(1080, 1920, 60),
        AspectRatio.LANDSCAPE: _specs(1920, 1080, 60),
    },
    Platform.TIKTOK: {
        AspectRatio.PORTRAIT: _specs(1080, 1920, 60),
        AspectRatio.SQUARE: _specs(1080, 1080, 60),
        AspectRatio.LANDSCAPE: _specs(1920, 1080, 60),
    },
    Platform.YOUTUBE: {
        AspectRatio.LANDSCAPE: _specs(1920, 1080, 300),
        AspectRatio.PORTRAIT: _specs(1080, 1920, 60),
        AspectRatio.SQUARE: _specs(1080, 1080, 60),
    },
    Platform.LINKEDIN: {
        AspectRatio.LANDSCAPE: _specs(1920, 1080, 180),
        AspectRatio.SQUARE: _specs(1080, 1080, 180),
        AspectRatio.PORTRAIT: _specs(1080, 1920, 180),
    },
    Platform.TWITTER: {
        AspectRatio.LANDSCAPE: _specs(1280, 720, 140),
        AspectRatio.SQUARE: _specs(1080, 1080, 140),
        AspectRatio.PORTRAIT: _specs(1080, 1920, 140),
    },
}

DEFAULT_VIDEO_SPECS = _specs(1920, 1080, 60)

STYLE_PROMPTS = {
    VideoStyle.REALISTIC: "realistic video, natural lighting, high quality footage",
    VideoStyle.ANIMATED: "animated style, smooth motion, vibrant colors",
    VideoStyle.CINEMATIC: "cinematic quality, professional cinematography, dramatic lighting",
    VideoStyle.DOCUMENTARY: "documentary style, authentic feel, natural presentation",
}

PLATFORM_CONTEXT = {
    Platform.INSTAGRAM: "social media optimized, engaging visuals, trendy aesthetic",
    Platform.TIKTOK: "dynamic movement, energetic pacing, youth-oriented content",
    Platform.YOUTUBE: "engaging content, clear narrative, professional quality",
    Platform.LINKEDIN: "professional presentation, business-appropriate, informative",
    Platform.TWITTER: "concise message, attention-grabbing, social media ready",
}


def get_platform_video_specs(platform: str, aspect_ratio: Optional[AspectRatio] = None) -> VideoSpecs:
    """Video specs for a platform/ratio; landscape when no ratio given."""
    try:
        table = PLATFORM_VIDEO_SPECS[Platform(platform)]
    except ValueError:
        return DEFAULT_VIDEO_SPECS
    return table.get(aspect_ratio or AspectRatio.LANDSCAPE, table[AspectRatio.LANDSCAPE])


def build_video_prompt(options: VideoGenerationOptions) -> str:
    return (
        f"{options.prompt}, {STYLE_PROMPTS[options.style]}, {PLATFORM_CONTEXT[options.platform]}, "
        "smooth motion, high resolution, professional quality"
    )


class VeoService(GenerativeService):
    """Veo client; generation is simulated until the API is available."""

    name = "veo"

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    def is_configured(self) -> bool:
        return self.settings.has_google_api_key

    async def generate_video(self, options: VideoGenerationOptions) -> VideoGenerationResult:
        """
        Generate a clip for the target platform.

        The clip length is min(requested or 15s, platform max_duration).
        """
        specs = get_platform_video_specs(options.platform, options.aspect_ratio)
        enhanced_prompt = build_video_prompt(options)
        logger.debug(
            "Veo mock generation %dx%d up to %ds, prompt %d chars",
            specs.width,
            specs.height,
            specs.max_duration,
            len(enhanced_prompt),
        )
        return await self._mock_video_generation(specs, options.duration)

    async def _mock_video_generation(self, specs: VideoSpecs, duration: Optional[int]) -> VideoGenerationResult:
        await asyncio.sleep(self.settings.media_simulated_latency)

        video_duration = min(duration or DEFAULT_DURATION, specs.max_duration)
        mock_id = int(time.time() * 1000)
        return VideoGenerationResult(
            success=True,
            video_url=(
                f"https://sample-videos.com/zip/10/mp4/"
                f"SampleVideo_{specs.width}x{specs.height}_1mb.mp4"
            ),
            thumbnail_url=f"https://picsum.photos/{specs.width}/{specs.height}?random={mock_id}",
            metadata=VideoMetadata(
                duration=video_duration,
                width=specs.width,
                height=specs.height,
                format="mp4",
                size=random.randint(1_000_000, 10_999_999),
                fps=specs.fps,
            ),
        )

    async def get_generation_status(self, job_id: str) -> GenerationStatus:
        """Progress of a generation job. Mock jobs complete synchronously."""
        logger.debug("Veo status requested for job %s", job_id)
        return GenerationStatus(status="completed", progress=100)

    async def health_check(self) -> bool:
        return self.is_configured()
