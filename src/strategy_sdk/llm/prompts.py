"""Prompt builders for each generation step.

Every builder returns ``(system_prompt, prompt)``. The persona is shared;
the step instructions carry the method (SMART, MECE, 80/20, hypothesis
workplan, answer-first synthesis).
"""

from __future__ import annotations

import json

from strategy_sdk.types import BreakdownType

CONSULTANT_PERSONA = (
    "You are a top-tier Strategic Partner. Your signature style is the Minto "
    "Pyramid Principle: Answer First. You prioritize clarity over complexity. "
    "Every time you use technical terms (like NPV, ROI, churn, etc.), you MUST "
    "provide a plain-English definition within the explanation."
)

_BREAKDOWN_GUIDANCE = {
    BreakdownType.FORMULAIC: (
        "Numerical drivers. Break down the equation. Explain every term clearly."
    ),
    BreakdownType.THEMATIC: (
        "Strategic themes. Create distinct conceptual pillars. "
        "Define the 'so-what' for each."
    ),
}


def _system(*sections: str) -> str:
    return "\n".join([CONSULTANT_PERSONA, *[s for s in sections if s]])


def _feedback_section(feedback: str) -> str:
    if not feedback.strip():
        return ""
    return f"\nThe user reviewed the previous version and asked for this change: {feedback.strip()}"


def analyze_prompt(problem: str, context: str = "") -> tuple[str, str]:
    system = _system(
        "Analyze the objective. Ensure it is precise. If it lacks a timeframe "
        "or metric, suggest one.",
        "Lead with an 'Answer-First' refined statement.",
        f"Context: {context.strip() or 'General strategic context'}",
    )
    return system, f'Analyze: "{problem}"'


def structure_prompt(
    objective: str, breakdown_type: BreakdownType, feedback: str = ""
) -> tuple[str, str]:
    system = _system(
        "Deconstruct the challenge using a MECE Logic Pyramid.",
        "Every node MUST include an 'explanation' field that defines the "
        "concept and its impact.",
        "Format: Root -> Categories -> Specific Issues. Use type 'root', "
        "'category' and 'issue' accordingly.",
        _BREAKDOWN_GUIDANCE[breakdown_type],
    )
    return system, f'Structure: "{objective}"{_feedback_section(feedback)}'


def prioritize_prompt(issues: list[str], feedback: str = "") -> tuple[str, str]:
    system = _system(
        "Apply Pareto's 80/20 rule. Identify the high-impact/low-effort 'Quick Wins'.",
        "Keep every item label exactly as given.",
        "Provide a concise Pareto summary justifying the selection.",
    )
    return system, f"Prioritize: {json.dumps(issues)}{_feedback_section(feedback)}"


def plan_prompt(issues: list[str], feedback: str = "") -> tuple[str, str]:
    system = _system(
        "Create a hypothesis-driven workplan. For each item, clearly state the "
        "hypothesis we are testing.",
        "Use the issue text exactly as given in the 'issue' field.",
    )
    return system, f"Workplan for: {json.dumps(issues)}{_feedback_section(feedback)}"


def synthesize_prompt(objective: str, context: str = "") -> tuple[str, str]:
    system = _system(
        "SYNTHESIZE THE ANSWER FIRST. Provide one clear, actionable recommendation.",
        "Be decisive.",
    )
    return system, f'Synthesize: "{objective}". Context: {context}'


__all__ = [
    "CONSULTANT_PERSONA",
    "analyze_prompt",
    "structure_prompt",
    "prioritize_prompt",
    "plan_prompt",
    "synthesize_prompt",
]
