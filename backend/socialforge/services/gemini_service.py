"""
SocialForge Backend — Google Gemini Service Implementation
===========================================================

What:  Text generation for social posts (captions, descriptions, hashtags)
       using the Google Gemini API.
How:   Builds a platform-specific prompt (length limit, style, tone, hashtag
       guidance) and sends it with generate_content_async. Safety filters
       block harassment, hate speech, sexual and dangerous content at
       MEDIUM_AND_ABOVE.
Who:   Composed by AIService, which calls it through a ResilientInvoker.
When:  For every caption/hashtag request and for content safety checks.

Error policy:
    SDK exceptions propagate unchanged so the invoker can classify them
    (google.api_core exceptions carry an HTTP ``code``). A response that
    arrives without text is NOT an exception: it returns
    TextGenerationResult(success=False).
"""

import logging
import time
from typing import Dict, Optional

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from socialforge.config import Settings, settings as default_settings
from socialforge.schemas.generation import (
    ContentType,
    Platform,
    TextGenerationOptions,
    TextGenerationResult,
    TokenUsage,
)
from socialforge.services.llm_base import GenerativeService

logger = logging.getLogger(__name__)


SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
}

# Per-platform writing guidance; max_length is the default character limit
PLATFORM_SPECS: Dict[Platform, Dict[str, object]] = {
    Platform.INSTAGRAM: {
        "max_length": 2200,
        "style": "engaging and visual-focused",
        "hashtags": "Use 5-10 relevant hashtags",
        "tone": "casual and authentic",
    },
    Platform.TIKTOK: {
        "max_length": 150,
        "style": "trendy and energetic",
        "hashtags": "Use 3-5 trending hashtags",
        "tone": "fun and youthful",
    },
    Platform.YOUTUBE: {
        "max_length": 5000,
        "style": "informative and engaging",
        "hashtags": "Use 3-5 relevant hashtags",
        "tone": "conversational and helpful",
    },
    Platform.LINKEDIN: {
        "max_length": 3000,
        "style": "professional and insightful",
        "hashtags": "Use 3-5 professional hashtags",
        "tone": "professional and thought-provoking",
    },
    Platform.TWITTER: {
        "max_length": 280,
        "style": "concise and impactful",
        "hashtags": "Use 1-3 relevant hashtags",
        "tone": "witty and engaging",
    },
}

HASHTAG_PROMPT = """Generate relevant hashtags for this {platform} content: "{content}"

Requirements:
- Generate 5-10 hashtags for Instagram
- Generate 3-5 hashtags for TikTok
- Generate 3-5 hashtags for YouTube
- Generate 3-5 hashtags for LinkedIn
- Generate 1-3 hashtags for Twitter

Return only the hashtags separated by spaces, starting with #."""


def build_platform_prompt(options: TextGenerationOptions) -> str:
    """Render the generation prompt for one platform and content type."""
    spec = PLATFORM_SPECS[options.platform]
    max_length = options.max_length or spec["max_length"]
    content_type = options.content_type.value
    platform = options.platform.value

    return f"""Create a {content_type} for {platform} based on this topic: "{options.prompt}"

Platform Requirements:
- Maximum length: {max_length} characters
- Style: {spec["style"]}
- Tone: {spec["tone"]}
- Hashtags: {spec["hashtags"]}

Guidelines:
- Make it engaging and authentic
- Include relevant emojis where appropriate
- Ensure content is appropriate and safe
- Focus on value and engagement
- Adapt language to the platform's audience

Generate only the {content_type} content, no additional explanations."""


def _usage_from(response) -> Optional[TokenUsage]:
    metadata = getattr(response, "usage_metadata", None)
    if not metadata:
        return None
    return TokenUsage(
        prompt_tokens=getattr(metadata, "prompt_token_count", 0) or 0,
        completion_tokens=getattr(metadata, "candidates_token_count", 0) or 0,
        total_tokens=getattr(metadata, "total_token_count", 0) or 0,
    )


class GeminiService(GenerativeService):
    """
    Google Gemini text generation client.

    Architecture:
        - Configures the SDK with the API key once per instance
        - Holds one GenerativeModel with generation config and safety settings
        - No retry logic here: AIService wraps calls in a ResilientInvoker
    """

    name = "gemini"

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

        # The SDK keeps auth in module-level state
        if self.settings.has_google_api_key:
            genai.configure(api_key=self.settings.gemini_api_key)

        self.model = genai.GenerativeModel(
            self.settings.gemini_model,
            generation_config={
                "temperature": self.settings.gemini_temperature,
                "top_k": self.settings.gemini_top_k,
                "top_p": self.settings.gemini_top_p,
                "max_output_tokens": self.settings.gemini_max_output_tokens,
            },
            safety_settings=SAFETY_SETTINGS,
        )

        logger.info("GeminiService initialized with model=%s", self.settings.gemini_model)

    def is_configured(self) -> bool:
        return self.settings.has_google_api_key

    async def generate_content(self, options: TextGenerationOptions) -> TextGenerationResult:
        """
        Generate platform-specific social media content.

        Args:
            options: Validated prompt, platform and content type.

        Returns:
            TextGenerationResult with trimmed text and token usage, or
            success=False when Gemini answered with no text.

        Raises:
            Whatever the Gemini SDK raises; the caller classifies it.
        """
        prompt = build_platform_prompt(options)
        return await self._generate(prompt, label=options.content_type.value)

    async def generate_hashtags(self, content: str, platform: Platform) -> TextGenerationResult:
        """Suggest hashtags for an existing post."""
        prompt = HASHTAG_PROMPT.format(platform=Platform(platform).value, content=content)
        return await self._generate(prompt, label=ContentType.HASHTAGS.value)

    async def complete(self, prompt: str) -> TextGenerationResult:
        """Send a raw prompt with no platform framing (used for safety checks)."""
        return await self._generate(prompt, label="raw")

    async def _generate(self, prompt: str, label: str) -> TextGenerationResult:
        start_time = time.perf_counter()

        response = await self.model.generate_content_async(prompt)

        duration_ms = (time.perf_counter() - start_time) * 1000
        if response is None:
            return TextGenerationResult(success=False, error="No response received from Gemini API")

        # .text raises ValueError when every candidate was blocked by safety filters
        try:
            text = response.text
        except ValueError:
            text = ""

        if not text or not text.strip():
            logger.warning("Gemini %s returned an empty response after %.0fms", label, duration_ms)
            return TextGenerationResult(success=False, error="Empty response from Gemini API")

        content = text.strip()
        logger.debug(
            "Gemini %s completed in %.0fms, generated %d chars",
            label,
            duration_ms,
            len(content),
        )
        return TextGenerationResult(success=True, content=content, usage=_usage_from(response))

    async def health_check(self) -> bool:
        """
        Check if the Gemini API is reachable.

        How:     Lists available models (no token cost).
        Returns: True if reachable and authenticated, False otherwise.
        """
        try:
            models = genai.list_models()
            model_names = [m.name for m in models]
            target = f"models/{self.settings.gemini_model}"
            if target not in model_names:
                logger.warning("Configured model %s not found in available models", target)
            return True
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False
