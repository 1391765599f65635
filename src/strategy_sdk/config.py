"""Strategy SDK Configuration.

This module defines the StrategyConfig class and preset configurations.
Enums and model mappings live in strategy_sdk.types.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from strategy_sdk.types import (
    API_MODEL_TIERS,
    DEFAULT_STEP_TIERS,
    GenerationStep,
    InvalidConfigError,
    ModelTier,
)


@dataclass
class StrategyConfig:
    """Configuration for the Gemini-backed generation gateway.

    Attributes:
        api_key: API key (optional, usually from env)
        env_file: Path to .env file for credentials
        strict_env_security: Block on permissive .env permissions
        model: Model name forced for every step (None = tier routing)
        step_tiers: Model tier per generation step
        temperature: Sampling temperature (0.0-1.0)
        max_output_tokens: Maximum output tokens per call
        timeout: Timeout in seconds for a single attempt
        max_retries: Retries after the first attempt fails
        retry_wait: Fixed wait between attempts, in seconds

    Example:
        >>> config = StrategyConfig(max_retries=1, timeout=60.0)
        >>> config.get_model(GenerationStep.STRUCTURE)
        'gemini-3-pro-preview'

        >>> fast = config.with_tier(ModelTier.LOW)
        >>> fast.get_model(GenerationStep.SYNTHESIZE)
        'gemini-3-flash-preview'
    """
    api_key: Optional[str] = None
    env_file: Optional[str] = None
    strict_env_security: bool = False
    model: Optional[str] = None
    step_tiers: dict[GenerationStep, ModelTier] = field(
        default_factory=lambda: dict(DEFAULT_STEP_TIERS)
    )
    temperature: Optional[float] = None
    max_output_tokens: Optional[int] = None
    timeout: float = 120.0
    max_retries: int = 2
    retry_wait: float = 1.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise InvalidConfigError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.retry_wait < 0:
            raise InvalidConfigError(f"retry_wait must be >= 0, got {self.retry_wait}")
        if self.timeout <= 0:
            raise InvalidConfigError(f"timeout must be > 0, got {self.timeout}")
        if self.temperature is not None and not 0.0 <= self.temperature <= 2.0:
            raise InvalidConfigError(f"temperature out of range: {self.temperature}")

    def get_tier(self, step: GenerationStep) -> ModelTier:
        return self.step_tiers.get(step, DEFAULT_STEP_TIERS[step])

    def get_model(self, step: GenerationStep) -> str:
        """Get model name for a step.

        Priority:
            1. Explicit ``model`` (applies to every step)
            2. The step's tier from ``step_tiers``
        """
        if self.model:
            return self.model
        return API_MODEL_TIERS[self.get_tier(step)]

    def with_tier(self, tier: ModelTier) -> StrategyConfig:
        """Return a new config that runs every step on one tier."""
        return replace(self, step_tiers={step: tier for step in GenerationStep})

    def with_model(self, model: str) -> StrategyConfig:
        """Return a new config with a fixed model."""
        return replace(self, model=model)


# =============================================================================
# Preset Configurations
# =============================================================================

DEFAULT_CONFIG = StrategyConfig()
"""Default: flash for definition/planning, pro for reasoning-heavy steps."""

FAST_CONFIG = StrategyConfig().with_tier(ModelTier.LOW)
"""Every step on the flash tier."""

QUALITY_CONFIG = StrategyConfig().with_tier(ModelTier.HIGH)
"""Every step on the pro tier."""


__all__ = [
    "StrategyConfig",
    "DEFAULT_CONFIG",
    "FAST_CONFIG",
    "QUALITY_CONFIG",
]
