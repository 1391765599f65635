"""Strategy Types - Shared type definitions for the strategy SDK.

Package Structure:
    - enums.py: Session enums (Phase, MessageKind, BreakdownType, Quadrant, ...)
    - config.py: Model tiers and provider mappings
    - models.py: Provider result models (LLMResult, TokenUsage)
    - report.py: Report model (Analysis, IssueTree, PrioritizationResult, ...)
    - transcript.py: Transcript log (Message, Action, TranscriptLog)
    - schemas.py: JSON response schemas per generation step
    - exceptions.py: Exception classes (StrategyError and subclasses)

Usage:
    >>> from strategy_sdk.types import Phase, ReportModel, TranscriptLog
    >>> from strategy_sdk.types import StrategyError, GenerationError
"""

from .enums import (
    ActionStyle,
    BreakdownType,
    GenerationStep,
    MessageKind,
    NodeKind,
    Phase,
    Quadrant,
    Rating,
    Speaker,
)
from .config import (
    API_MODEL_TIERS,
    CURRENT_MODELS,
    DEFAULT_STEP_TIERS,
    GEMINI_API_KEY_ENV,
    PROVIDER_NAME,
    ModelTier,
)
from .models import LLMResult, ResultType, TokenUsage
from .report import (
    Analysis,
    IssueNode,
    IssueTree,
    MatrixItem,
    PrioritizationResult,
    Recommendation,
    ReportModel,
    Synthesis,
    WorkplanItem,
)
from .transcript import Action, Message, MessageListener, TranscriptLog
from .schemas import RESPONSE_SCHEMAS
from .exceptions import (
    AuthenticationError,
    ExecutionTimeoutError,
    GenerationError,
    InvalidConfigError,
    NothingToPrioritizeError,
    ParseError,
    ProviderCallError,
    StateInconsistencyError,
    StrategyError,
    ValidationError,
)

__all__ = [
    # Enums
    "ActionStyle",
    "BreakdownType",
    "GenerationStep",
    "MessageKind",
    "NodeKind",
    "Phase",
    "Quadrant",
    "Rating",
    "Speaker",
    # Model tiers
    "API_MODEL_TIERS",
    "CURRENT_MODELS",
    "DEFAULT_STEP_TIERS",
    "GEMINI_API_KEY_ENV",
    "PROVIDER_NAME",
    "ModelTier",
    # Provider results
    "LLMResult",
    "ResultType",
    "TokenUsage",
    # Report
    "Analysis",
    "IssueNode",
    "IssueTree",
    "MatrixItem",
    "PrioritizationResult",
    "Recommendation",
    "ReportModel",
    "Synthesis",
    "WorkplanItem",
    # Transcript
    "Action",
    "Message",
    "MessageListener",
    "TranscriptLog",
    # Schemas
    "RESPONSE_SCHEMAS",
    # Exceptions
    "AuthenticationError",
    "ExecutionTimeoutError",
    "GenerationError",
    "InvalidConfigError",
    "NothingToPrioritizeError",
    "ParseError",
    "ProviderCallError",
    "StateInconsistencyError",
    "StrategyError",
    "ValidationError",
]
