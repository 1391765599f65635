"""Strategy Types - Provider Result Models.

Unified result returned by the provider layer for one remote call.
The gateway turns unsuccessful results into exceptions so its retry
policy can act on them.

For Gateway Authors:
    1. Check result.success first
    2. result.text holds the raw JSON text returned by the model
    3. result.error holds the provider error message if success=False
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ResultType(Enum):
    """Result type.

    Attributes:
        TEXT: Free text response
        JSON: Response constrained to a JSON schema
        ERROR: Error occurred
    """
    TEXT = "text"
    JSON = "json"
    ERROR = "error"


@dataclass
class TokenUsage:
    """Token usage statistics."""
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TokenUsage:
        """Create from dictionary (JSON deserialization)."""
        return cls(
            input_tokens=data.get("input_tokens", 0),
            output_tokens=data.get("output_tokens", 0),
            total_tokens=data.get("total_tokens", 0),
        )


@dataclass
class LLMResult:
    """Result of a single provider call.

    Attributes:
        success: Whether the call succeeded
        result_type: Type of result (TEXT, JSON, ERROR)
        provider: Provider name
        model: Model name used
        text: Response text (JSON text for schema-constrained calls)
        duration_ms: Call duration in milliseconds
        token_usage: Token usage statistics
        error: Error message if failed
        raw: Raw response for debugging
    """
    success: bool
    result_type: ResultType
    provider: str
    model: str

    text: str = ""
    duration_ms: int = 0
    token_usage: Optional[TokenUsage] = None
    error: Optional[str] = None

    raw: Optional[Any] = None

    @property
    def has_text(self) -> bool:
        """Check if result has text content."""
        return bool(self.text)

    def __str__(self) -> str:
        """Human-readable string representation."""
        if self.success:
            preview = self.text[:100] + "..." if len(self.text) > 100 else self.text
            return f"LLMResult({self.result_type.value}, {self.provider}/{self.model}): {preview}"
        else:
            return f"LLMResult(ERROR, {self.provider}/{self.model}): {self.error}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "result_type": self.result_type.value,
            "provider": self.provider,
            "model": self.model,
            "text": self.text,
            "duration_ms": self.duration_ms,
            "token_usage": self.token_usage.to_dict() if self.token_usage else None,
            "error": self.error,
            # Note: raw is excluded from serialization (debugging only)
        }


__all__ = ["ResultType", "TokenUsage", "LLMResult"]
