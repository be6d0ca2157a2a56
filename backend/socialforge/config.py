"""
SocialForge Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a module-level `settings` object.
       InvocationConfig is the immutable retry/timeout policy handed to a
       ResilientInvoker; Settings.invocation_config() derives one from env.
Who:   Imported by the AI service layer and by logging setup.
When:  Loaded once at module import time.

Durations are floats in seconds throughout.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings


class InvocationConfig(BaseModel):
    """
    Retry and timeout policy for one resilient invoker (or one call).

    Attributes:
        attempts:    Total attempts including the first (>= 1)
        base_delay:  Backoff before the second attempt, in seconds
        max_delay:   Upper bound on any single backoff, in seconds
        multiplier:  Growth factor between successive backoffs (>= 1)
        timeout:     Per-attempt timeout, in seconds
    """

    model_config = ConfigDict(frozen=True)

    attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=1.0, ge=0.0)
    max_delay: float = Field(default=10.0, ge=0.0)
    multiplier: float = Field(default=2.0, ge=1.0)
    timeout: float = Field(default=30.0, gt=0.0)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments MUST set
    GEMINI_API_KEY.
    """

    # ── Google AI ─────────────────────────────────────────────────────────
    # One key serves Gemini, Imagen and Veo
    # How to obtain: https://aistudio.google.com/app/apikey
    gemini_api_key: str = Field(
        default="",
        description="Google Generative AI API key"
    )

    # Options: gemini-1.5-pro (default), gemini-1.5-flash (faster, cheaper)
    gemini_model: str = Field(default="gemini-1.5-pro")
    gemini_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    gemini_top_k: int = Field(default=40, ge=1)
    gemini_top_p: float = Field(default=0.95, gt=0.0, le=1.0)
    gemini_max_output_tokens: int = Field(default=1024, ge=1, le=8192)

    imagen_model: str = Field(default="imagen-3.0-generate-001")
    veo_model: str = Field(default="veo-001")

    # Imagen and Veo are placeholders until their APIs are public; this is
    # the delay their mock generators simulate
    media_simulated_latency: float = Field(default=0.1, ge=0.0, le=10.0)

    # ── Retry Configuration ───────────────────────────────────────────────
    # delay before attempt n+1 = min(max, delay * multiplier^(n-1)) + 0-10% jitter
    ai_retry_attempts: int = Field(default=3, ge=1, le=10)
    ai_retry_delay: float = Field(default=1.0, ge=0.0, le=60.0)
    ai_max_retry_delay: float = Field(default=10.0, ge=0.0, le=300.0)
    ai_backoff_multiplier: float = Field(default=2.0, ge=1.0, le=10.0)
    ai_timeout: float = Field(default=30.0, gt=0.0, le=600.0)

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # GEMINI_API_KEY and gemini_api_key both work
        "extra": "ignore",
    }

    @property
    def has_google_api_key(self) -> bool:
        return bool(self.gemini_api_key) and self.gemini_api_key != "your_gemini_api_key_here"

    def invocation_config(self) -> InvocationConfig:
        """Build the default retry/timeout policy from the ai_* settings."""
        return InvocationConfig(
            attempts=self.ai_retry_attempts,
            base_delay=self.ai_retry_delay,
            max_delay=self.ai_max_retry_delay,
            multiplier=self.ai_backoff_multiplier,
            timeout=self.ai_timeout,
        )

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called by deployment entry points before serving traffic.
        How:   Collects every problem and raises one ValueError with guidance.
        """
        errors: List[str] = []
        if not self.has_google_api_key:
            errors.append(
                "GEMINI_API_KEY is not set. "
                "Get a key at https://aistudio.google.com/app/apikey"
            )
        if self.ai_max_retry_delay < self.ai_retry_delay:
            errors.append(
                f"AI_MAX_RETRY_DELAY ({self.ai_max_retry_delay}) is lower than "
                f"AI_RETRY_DELAY ({self.ai_retry_delay}); every backoff would be capped"
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Module-level instance; services accept a Settings override for tests
settings = Settings()
