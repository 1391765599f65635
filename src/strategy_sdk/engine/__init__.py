"""Conversation orchestration core.

Usage:
    >>> from strategy_sdk.engine import ConversationEngine
    >>> engine = ConversationEngine(gateway)
    >>> await engine.submit_text("Churn doubled this quarter")
"""

from .actions import BREAKDOWN_ACTIONS, Choice, decision_actions, resolve_choice
from .conversation import ConversationEngine
from .hooks import EngineObserver
from .selection import MAX_PLAN_ISSUES, extract_issue_labels, select_plan_issues
from .state import EngineState, TurnResult

__all__ = [
    "BREAKDOWN_ACTIONS",
    "Choice",
    "ConversationEngine",
    "EngineObserver",
    "EngineState",
    "MAX_PLAN_ISSUES",
    "TurnResult",
    "decision_actions",
    "extract_issue_labels",
    "resolve_choice",
    "select_plan_issues",
]
