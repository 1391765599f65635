"""Strategy Types - Model Tiers and Provider Mappings.

Model Configuration (January 2026):
- Two tiers per the Gemini API: HIGH (pro) and LOW (flash)
- Each generation step has a default tier; flash covers the cheap
  definition and planning steps, pro covers the reasoning-heavy ones
"""

from __future__ import annotations

from enum import Enum

from .enums import GenerationStep


class ModelTier(Enum):
    """Model tier for automatic model selection.

    Attributes:
        HIGH: Best reasoning, higher latency/cost
        LOW: Fast and cheap, good for simple steps
    """
    HIGH = "high"
    LOW = "low"


# API model names for direct google-genai calls
API_MODEL_TIERS: dict[ModelTier, str] = {
    ModelTier.HIGH: "gemini-3-pro-preview",
    ModelTier.LOW: "gemini-3-flash-preview",
}

CURRENT_MODELS: set[str] = set(API_MODEL_TIERS.values())

DEFAULT_STEP_TIERS: dict[GenerationStep, ModelTier] = {
    GenerationStep.ANALYZE: ModelTier.LOW,
    GenerationStep.STRUCTURE: ModelTier.HIGH,
    GenerationStep.PRIORITIZE: ModelTier.HIGH,
    GenerationStep.PLAN: ModelTier.LOW,
    GenerationStep.SYNTHESIZE: ModelTier.HIGH,
}

GEMINI_API_KEY_ENV = "GEMINI_API_KEY"

PROVIDER_NAME = "gemini"


__all__ = [
    "ModelTier",
    "API_MODEL_TIERS",
    "CURRENT_MODELS",
    "DEFAULT_STEP_TIERS",
    "GEMINI_API_KEY_ENV",
    "PROVIDER_NAME",
]
