"""
SocialForge Backend — Services Layer
=====================================

What:  Clients for generative AI providers and the resilience layer around them.

Service Inventory:
    - ResilientInvoker: timeout, error classification, retry with backoff
    - GenerativeService (abstract): common surface of provider clients
    - GeminiService: captions, descriptions, hashtags (Google Gemini)
    - ImagenService: images (Google Imagen, mock until the API is public)
    - VeoService: videos (Google Veo, mock until the API is public)
    - AIService: facade composing the clients behind one invoker
"""
