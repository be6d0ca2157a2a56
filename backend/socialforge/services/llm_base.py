"""
SocialForge Backend — Abstract Generative Service Interface
============================================================

What:  Abstract base class for the clients that call generative AI providers.
How:   Concrete implementations (GeminiService, ImagenService, VeoService)
       implement is_configured() and health_check(); each exposes its own
       typed generate_* coroutine.
Who:   Composed by AIService, which wraps every generate_* call in a
       ResilientInvoker.

Contract:
    - Provider failures RAISE (SDK exceptions, HTTP errors). Implementations
      must not catch and convert them into result objects, or the invoker
      cannot classify and retry them.
    - Implementations do not retry on their own; retry policy lives in the
      invoker.
"""

from abc import ABC, abstractmethod


class GenerativeService(ABC):
    """
    Common surface of every generative AI client.

    Attributes:
        name:  Service label used in logs and error classification
    """

    name: str = "generative"

    @abstractmethod
    def is_configured(self) -> bool:
        """True when the credentials this client needs are present."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check whether the provider is reachable and operational.

        What:    Lightweight connectivity test (does NOT consume generation quota).
        Returns: True if reachable, False otherwise. Never raises.
        """
        ...
