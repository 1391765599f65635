"""LLM providers."""

from .gemini_api import GeminiAPIProvider

__all__ = ["GeminiAPIProvider"]
