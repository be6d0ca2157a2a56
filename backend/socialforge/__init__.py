"""
SocialForge Backend — Application Package Initializer
======================================================

What: AI generation layer of the SocialForge content backend.

Architecture Note:

    ┌─────────────────────────────────────┐
    │     AIService (facade)              │  ← one call per generation request
    ├─────────────────────────────────────┤
    │     ResilientInvoker                │  ← timeout, classify, retry, log
    ├─────────────────────────────────────┤
    │  Gemini / Imagen / Veo clients      │  ← provider SDK calls
    ├─────────────────────────────────────┤
    │  Schemas · Config · Exceptions      │  ← pydantic models, settings, errors
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
