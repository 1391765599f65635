"""Strategy Types - Session Enums.

Enums for the guided problem-solving session: phases, transcript
speakers and message kinds, decision styles, and the vocabulary of the
structured results (tree node kinds, matrix ratings, quadrants).
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional


class Phase(Enum):
    """Stage of the guided session.

    Attributes:
        DEFINE: Objective definition (SMART analysis)
        STRUCTURE: MECE issue tree
        PRIORITIZE: 80/20 impact/effort matrix
        PLAN: Hypothesis-driven workplan
        DONE: Synthesis produced; further input evolves it
    """
    DEFINE = "define"
    STRUCTURE = "structure"
    PRIORITIZE = "prioritize"
    PLAN = "plan"
    DONE = "done"

    @property
    def next(self) -> Optional["Phase"]:
        """Following phase, or None for DONE."""
        order = list(Phase)
        index = order.index(self)
        return order[index + 1] if index + 1 < len(order) else None


class GenerationStep(Enum):
    """Remote generation operation, one per phase (plus synthesis)."""
    ANALYZE = "analyze"
    STRUCTURE = "structure"
    PRIORITIZE = "prioritize"
    PLAN = "plan"
    SYNTHESIZE = "synthesize"

    @property
    def display_name(self) -> str:
        return {
            GenerationStep.ANALYZE: "Analysis",
            GenerationStep.STRUCTURE: "Structuring",
            GenerationStep.PRIORITIZE: "Prioritization",
            GenerationStep.PLAN: "Planning",
            GenerationStep.SYNTHESIZE: "Synthesis",
        }[self]


class Speaker(Enum):
    USER = "user"
    ASSISTANT = "assistant"


class MessageKind(Enum):
    """Payload kind of a transcript message."""
    PLAIN_TEXT = "text"
    ANALYSIS_RESULT = "smart-analysis"
    TREE_RESULT = "issue-tree"
    MATRIX_RESULT = "matrix"
    WORKPLAN_RESULT = "workplan"
    SYNTHESIS_RESULT = "synthesis"


class ActionStyle(Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class BreakdownType(Enum):
    """How the objective is decomposed into an issue tree.

    Attributes:
        FORMULAIC: Numeric driver decomposition (outcome as a function of
            measurable components)
        THEMATIC: Qualitative pillars for ambiguous strategic problems
    """
    FORMULAIC = "formulaic"
    THEMATIC = "thematic"


class NodeKind(Enum):
    ROOT = "root"
    CATEGORY = "category"
    ISSUE = "issue"

    @classmethod
    def for_depth(cls, depth: int) -> "NodeKind":
        """Kind implied by position in a root/category/issue tree."""
        if depth <= 0:
            return cls.ROOT
        if depth == 1:
            return cls.CATEGORY
        return cls.ISSUE


class Rating(Enum):
    """Impact or effort rating."""
    HIGH = "High"
    LOW = "Low"

    @classmethod
    def parse(cls, value: object) -> Optional["Rating"]:
        if isinstance(value, Rating):
            return value
        if not isinstance(value, str):
            return None
        lowered = value.strip().lower()
        for rating in cls:
            if rating.value.lower() == lowered:
                return rating
        return None


def _squash(value: str) -> str:
    return re.sub(r"[^a-z]", "", value.lower())


class Quadrant(Enum):
    """Impact/effort matrix quadrant."""
    QUICK_WINS = "Quick Wins"
    MAJOR_PROJECTS = "Major Projects"
    FILL_INS = "Fill Ins"
    THANKLESS_TASKS = "Thankless Tasks"

    @classmethod
    def from_ratings(cls, impact: Rating, effort: Rating) -> "Quadrant":
        """Quadrant for an impact/effort pair."""
        if impact is Rating.HIGH:
            return cls.QUICK_WINS if effort is Rating.LOW else cls.MAJOR_PROJECTS
        return cls.FILL_INS if effort is Rating.LOW else cls.THANKLESS_TASKS

    @classmethod
    def parse(cls, value: object) -> Optional["Quadrant"]:
        """Lenient lookup: "Quick Wins", "quick_wins", "QuickWin" all match."""
        if isinstance(value, Quadrant):
            return value
        if not isinstance(value, str) or not value.strip():
            return None
        key = _squash(value).rstrip("s")
        for quadrant in cls:
            if _squash(quadrant.value).rstrip("s") == key:
                return quadrant
        return None


__all__ = [
    "Phase",
    "GenerationStep",
    "Speaker",
    "MessageKind",
    "ActionStyle",
    "BreakdownType",
    "NodeKind",
    "Rating",
    "Quadrant",
]
