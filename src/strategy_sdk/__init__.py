"""Strategy SDK: guided strategic problem solving on top of Gemini.

This package walks a user through define → structure → prioritize →
plan → synthesize. All reasoning is delegated to the Gemini API; the
package owns the conversation state machine, the report and the
transcript.

Basic Usage (Async):
    >>> from strategy_sdk import ConversationEngine, GeminiGateway, StrategyConfig
    >>> engine = ConversationEngine(GeminiGateway(StrategyConfig()))
    >>> await engine.submit_text("Revenue is down, need to fix it")
    >>> for action in engine.pending_actions():
    ...     print(action.label, action.value)

Resuming a Finished Report:
    >>> report = ReportModel.from_dict(json.load(open("report.json")))
    >>> engine = ConversationEngine.resume(GeminiGateway(), report)
    >>> await engine.submit_text("Also consider EU market")

Presets:
    >>> from strategy_sdk import FAST_CONFIG, QUALITY_CONFIG
    >>> gateway = GeminiGateway(FAST_CONFIG)

Credentials:
    GEMINI_API_KEY environment variable, StrategyConfig.api_key, or
    StrategyConfig.env_file pointing at a .env file.
"""

__version__ = "0.1.0"

from strategy_sdk.types import (
    # Enums
    ActionStyle,
    BreakdownType,
    GenerationStep,
    MessageKind,
    ModelTier,
    NodeKind,
    Phase,
    Quadrant,
    Rating,
    Speaker,
    # Report and transcript
    Action,
    Analysis,
    IssueNode,
    IssueTree,
    MatrixItem,
    Message,
    PrioritizationResult,
    Recommendation,
    ReportModel,
    Synthesis,
    TranscriptLog,
    WorkplanItem,
    # Provider results
    LLMResult,
    TokenUsage,
    # Exceptions
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
from strategy_sdk.config import (
    DEFAULT_CONFIG,
    FAST_CONFIG,
    QUALITY_CONFIG,
    StrategyConfig,
)
from strategy_sdk.llm import GeminiAPIProvider, GeminiGateway, GenerationGateway
from strategy_sdk.engine import ConversationEngine, EngineObserver, TurnResult

__all__ = [
    "__version__",
    # Enums
    "ActionStyle",
    "BreakdownType",
    "GenerationStep",
    "MessageKind",
    "ModelTier",
    "NodeKind",
    "Phase",
    "Quadrant",
    "Rating",
    "Speaker",
    # Report and transcript
    "Action",
    "Analysis",
    "IssueNode",
    "IssueTree",
    "MatrixItem",
    "Message",
    "PrioritizationResult",
    "Recommendation",
    "ReportModel",
    "Synthesis",
    "TranscriptLog",
    "WorkplanItem",
    # Provider results
    "LLMResult",
    "TokenUsage",
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
    # Config
    "DEFAULT_CONFIG",
    "FAST_CONFIG",
    "QUALITY_CONFIG",
    "StrategyConfig",
    # LLM layer
    "GeminiAPIProvider",
    "GeminiGateway",
    "GenerationGateway",
    # Engine
    "ConversationEngine",
    "EngineObserver",
    "TurnResult",
]
