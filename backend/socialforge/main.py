"""
SocialForge Backend — AI Layer Bootstrap
=========================================

What:  Builds the process-wide AIService from configuration.
How:   Sets up logging, validates configuration (logging problems instead of
       exiting, so the process can still report its own status), then wires
       the invoker and provider clients.
Who:   Called once by whichever process hosts the AI layer (API server,
       scheduler worker, CLI).
"""

import logging
from typing import Optional

from socialforge.config import Settings, settings as default_settings
from socialforge.observability import setup_logging
from socialforge.services.ai_service import AIService

logger = logging.getLogger(__name__)


def create_ai_service(settings: Optional[Settings] = None, configure_logging: bool = True) -> AIService:
    """
    Startup sequence:
        1. Setup logging
        2. Validate critical configuration
        3. Build AIService (invoker + Gemini/Imagen/Veo clients)
    """
    settings = settings or default_settings
    if configure_logging:
        setup_logging(settings.log_level)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("AI generation calls will fail until the configuration is fixed.")

    service = AIService.from_settings(settings)
    policy = settings.invocation_config()
    logger.info(
        "AI service ready: model=%s attempts=%d timeout=%gs backoff=%gs x%g (max %gs)",
        settings.gemini_model,
        policy.attempts,
        policy.timeout,
        policy.base_delay,
        policy.multiplier,
        policy.max_delay,
    )
    return service
