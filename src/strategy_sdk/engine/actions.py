"""Decision actions offered in the transcript and how choices resolve.

The engine emits phase-qualified values (``confirm_tree``) and also
accepts the generic ``confirm`` / ``refine``. A qualified value that
belongs to another phase resolves to nothing, so stale buttons are
ignored.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from strategy_sdk.types import Action, ActionStyle, BreakdownType, Phase


class Choice(Enum):
    CONFIRM = "confirm"
    REFINE = "refine"
    FORMULAIC = "formulaic"
    THEMATIC = "thematic"

    @property
    def breakdown_type(self) -> Optional[BreakdownType]:
        if self is Choice.FORMULAIC:
            return BreakdownType.FORMULAIC
        if self is Choice.THEMATIC:
            return BreakdownType.THEMATIC
        return None


_PHASE_SUFFIX = {
    Phase.DEFINE: "smart",
    Phase.STRUCTURE: "tree",
    Phase.PRIORITIZE: "prioritization",
    Phase.PLAN: "plan",
}


def confirm_value(phase: Phase) -> str:
    return f"confirm_{_PHASE_SUFFIX[phase]}"


def refine_value(phase: Phase) -> str:
    return f"refine_{_PHASE_SUFFIX[phase]}"


def resolve_choice(phase: Phase, value: str) -> Optional[Choice]:
    """Map an action value to a choice valid in ``phase``, or None."""
    if phase not in _PHASE_SUFFIX or not isinstance(value, str):
        return None
    value = value.strip().lower()

    if value in ("confirm", confirm_value(phase)):
        return Choice.CONFIRM
    if value in ("refine", refine_value(phase)):
        return Choice.REFINE
    if phase is Phase.STRUCTURE:
        if value in ("formulaic", "type_formulaic"):
            return Choice.FORMULAIC
        if value in ("thematic", "type_thematic"):
            return Choice.THEMATIC
    return None


def decision_actions(phase: Phase, confirm_label: str, refine_label: str) -> list[Action]:
    """Confirm/refine pair for a phase."""
    return [
        Action(label=confirm_label, value=confirm_value(phase), style=ActionStyle.PRIMARY),
        Action(label=refine_label, value=refine_value(phase), style=ActionStyle.SECONDARY),
    ]


BREAKDOWN_ACTIONS = [
    Action(
        label="Quantitative Drivers",
        value="type_formulaic",
        style=ActionStyle.PRIMARY,
        rationale=(
            "Best for problems involving metrics, revenue, or costs. We will map "
            "the specific drivers that mathematically lead to your target."
        ),
    ),
    Action(
        label="Qualitative Pillars",
        value="type_thematic",
        style=ActionStyle.PRIMARY,
        rationale=(
            "Best for ambiguous strategic challenges like market positioning or "
            "organization. We will break this into distinct conceptual themes."
        ),
    ),
]


__all__ = [
    "Choice",
    "BREAKDOWN_ACTIONS",
    "confirm_value",
    "refine_value",
    "resolve_choice",
    "decision_actions",
]
