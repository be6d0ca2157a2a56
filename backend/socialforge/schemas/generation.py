"""
SocialForge Backend — Generation Request/Result Schemas
========================================================

What:  Pydantic models for the inputs and outputs of the generative services.
How:   Request models validate caller input before any API call is made, so
       invalid prompts never reach the retry loop. Result models are what the
       services return and what an outer API layer would serialize.
Who:   Built by callers of AIService; returned by Gemini/Imagen/Veo services.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field


class Platform(str, Enum):
    """Social networks the generators tailor content for."""

    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    YOUTUBE = "youtube"
    LINKEDIN = "linkedin"
    TWITTER = "twitter"


class ContentType(str, Enum):
    CAPTION = "caption"
    HASHTAGS = "hashtags"
    DESCRIPTION = "description"


class AspectRatio(str, Enum):
    SQUARE = "square"
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class ImageStyle(str, Enum):
    PHOTOGRAPHIC = "photographic"
    DIGITAL_ART = "digital-art"
    ILLUSTRATION = "illustration"
    ANIME = "anime"


class VideoStyle(str, Enum):
    REALISTIC = "realistic"
    ANIMATED = "animated"
    CINEMATIC = "cinematic"
    DOCUMENTARY = "documentary"


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("Prompt is required")
    return value


PromptText = Annotated[str, AfterValidator(_require_text)]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class TextGenerationOptions(BaseModel):
    """
    What:  Input for caption/description generation with Gemini.

    max_length overrides the platform's default character limit.
    """
    prompt: PromptText = Field(description="Topic or brief for the post")
    platform: Platform
    content_type: ContentType = ContentType.CAPTION
    max_length: Optional[int] = Field(default=None, gt=0, le=10_000)


class ImageGenerationOptions(BaseModel):
    prompt: PromptText = Field(max_length=1000)
    platform: Platform
    style: ImageStyle = ImageStyle.PHOTOGRAPHIC
    aspect_ratio: Optional[AspectRatio] = None


class VideoGenerationOptions(BaseModel):
    """duration is in seconds and is further capped by the platform maximum."""
    prompt: PromptText = Field(max_length=500)
    platform: Platform
    style: VideoStyle = VideoStyle.REALISTIC
    aspect_ratio: Optional[AspectRatio] = None
    duration: Optional[int] = Field(default=None, ge=1, le=300)


# ══════════════════════════════════════════════════════════════════════════
# Result Models
# ══════════════════════════════════════════════════════════════════════════


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class TextGenerationResult(BaseModel):
    """
    What:  Outcome of a Gemini text call.

    success=False is reserved for responses that arrived but carried no usable
    text; transport and API failures raise AIServiceError instead.
    """
    success: bool
    content: Optional[str] = None
    error: Optional[str] = None
    usage: Optional[TokenUsage] = None


class MediaDimensions(BaseModel):
    width: int
    height: int


class ImageMetadata(MediaDimensions):
    format: str = "jpeg"
    size: int = Field(description="File size in bytes")


class ImageGenerationResult(BaseModel):
    success: bool
    image_url: Optional[str] = None
    error: Optional[str] = None
    metadata: Optional[ImageMetadata] = None


class VideoSpecs(MediaDimensions):
    max_duration: int = Field(description="Longest clip the platform accepts, seconds")
    fps: int = 30


class VideoMetadata(MediaDimensions):
    duration: int
    format: str = "mp4"
    size: int
    fps: int


class VideoGenerationResult(BaseModel):
    success: bool
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    error: Optional[str] = None
    metadata: Optional[VideoMetadata] = None


class GenerationStatus(BaseModel):
    """Progress of an asynchronous (video) generation job."""
    status: str
    progress: int = Field(ge=0, le=100)


class ContentSafetyVerdict(BaseModel):
    safe: bool
    reason: Optional[str] = None


class ServiceAvailability(BaseModel):
    configured: bool
    available: bool


class ServiceStatus(BaseModel):
    gemini: ServiceAvailability
    imagen: ServiceAvailability
    veo: ServiceAvailability
