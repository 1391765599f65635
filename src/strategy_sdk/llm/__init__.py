"""LLM access layer: Gemini provider, prompts and the generation gateway."""

from .gateway import GeminiGateway, GenerationGateway, align_prioritization, align_workplan
from .providers import GeminiAPIProvider

__all__ = [
    "GeminiAPIProvider",
    "GeminiGateway",
    "GenerationGateway",
    "align_prioritization",
    "align_workplan",
]
