"""Strategy Types - Exception Classes.

This module defines all exceptions used by the strategy SDK.
All exceptions inherit from StrategyError for easy catching.

Usage:
    try:
        tree = await gateway.structure(objective, BreakdownType.THEMATIC)
    except GenerationError as e:
        print(f"{e.step.display_name} failed: {e.cause}")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .enums import GenerationStep


class StrategyError(Exception):
    """Base exception for all strategy SDK errors."""
    pass


class ValidationError(StrategyError):
    """Raised for malformed user input or an unusable request.

    The conversation engine handles these locally (no-op or a friendly
    transcript message); they are never propagated as a crash.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NothingToPrioritizeError(ValidationError):
    """Raised when the issue tree has no issue-kind leaves."""

    def __init__(self, message: str = "No issues found in the tree to prioritize."):
        super().__init__(message)


class StateInconsistencyError(StrategyError):
    """An action that matches nothing expected for the current state.

    The engine logs and swallows these; the class exists so callers that
    drive the engine state directly have something precise to raise.
    """

    def __init__(self, action: str, phase: str = ""):
        self.action = action
        self.phase = phase
        msg = f"Unexpected action '{action}'"
        if phase:
            msg += f" in phase {phase}"
        super().__init__(msg)


class GenerationError(StrategyError):
    """Raised when a gateway operation exhausted its retries."""

    def __init__(self, step: "GenerationStep", cause: Optional[BaseException] = None):
        self.step = step
        self.cause = cause
        msg = f"{step.display_name} failed"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class InvalidConfigError(StrategyError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str):
        super().__init__(f"Invalid configuration: {message}")


class AuthenticationError(StrategyError):
    """Raised when authentication fails."""

    def __init__(self, provider: str, message: str = ""):
        self.provider = provider
        msg = f"Authentication failed for {provider}"
        if message:
            msg += f": {message}"
        super().__init__(msg)


class ProviderCallError(StrategyError):
    """Raised when the provider call itself returned an error result."""

    def __init__(self, provider: str, message: str = ""):
        self.provider = provider
        msg = f"{provider} call failed"
        if message:
            msg += f": {message}"
        super().__init__(msg)


class ParseError(StrategyError):
    """Raised when unable to parse provider output.

    Usually malformed JSON or a response that violates the phase schema.
    """

    def __init__(self, provider: str, message: str = ""):
        self.provider = provider
        msg = f"Failed to parse {provider} output"
        if message:
            msg += f": {message}"
        super().__init__(msg)


class ExecutionTimeoutError(StrategyError):
    """Raised when a single generation attempt exceeds the timeout."""

    def __init__(self, timeout: float, provider: str = ""):
        self.timeout = timeout
        self.provider = provider
        msg = f"Execution timed out after {timeout}s"
        if provider:
            msg += f" ({provider})"
        super().__init__(msg)


__all__ = [
    "StrategyError",
    "ValidationError",
    "NothingToPrioritizeError",
    "StateInconsistencyError",
    "GenerationError",
    "InvalidConfigError",
    "AuthenticationError",
    "ProviderCallError",
    "ParseError",
    "ExecutionTimeoutError",
]
