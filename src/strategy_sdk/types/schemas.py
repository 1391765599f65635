"""Strategy Types - Response Schemas.

JSON response schemas sent with every generation request, one per
step. They use the OpenAPI subset accepted by google-genai's
``GenerateContentConfig.response_schema`` and the camelCase keys that
the report types deserialize.
"""

from __future__ import annotations

from typing import Any

from .enums import GenerationStep, Quadrant, Rating

_STRING = {"type": "STRING"}
_BOOLEAN = {"type": "BOOLEAN"}
_STRING_LIST = {"type": "ARRAY", "items": _STRING}


def _node(children: dict[str, Any] | None, required: list[str]) -> dict[str, Any]:
    properties: dict[str, Any] = {
        "id": _STRING,
        "label": _STRING,
        "explanation": _STRING,
        "type": {"type": "STRING", "enum": ["root", "category", "issue"]},
    }
    if children is not None:
        properties["children"] = {"type": "ARRAY", "items": children}
    return {"type": "OBJECT", "properties": properties, "required": required}


ANALYSIS_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "isSpecific": _BOOLEAN,
        "isMeasurable": _BOOLEAN,
        "isActionable": _BOOLEAN,
        "isRelevant": _BOOLEAN,
        "isTimeBound": _BOOLEAN,
        "feedback": _STRING,
        "improvedStatement": _STRING,
        "potentialStakeholders": _STRING_LIST,
        "recommendedApproach": _STRING,
        "challengerQuestions": _STRING_LIST,
        "identifiedBiases": _STRING_LIST,
    },
    "required": [
        "isSpecific",
        "isMeasurable",
        "isActionable",
        "isRelevant",
        "isTimeBound",
        "feedback",
        "improvedStatement",
        "challengerQuestions",
    ],
}

_ISSUE_NODE = _node(None, ["id", "label", "explanation"])
_CATEGORY_NODE = _node(_ISSUE_NODE, ["id", "label", "explanation", "children"])
_ROOT_NODE = _node(_CATEGORY_NODE, ["id", "label", "explanation", "children"])

ISSUE_TREE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "root": _ROOT_NODE,
        "meceExplanation": _STRING,
    },
    "required": ["root", "meceExplanation"],
}

PRIORITIZATION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "items": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": _STRING,
                    "label": _STRING,
                    "impact": {"type": "STRING", "enum": [r.value for r in Rating]},
                    "effort": {"type": "STRING", "enum": [r.value for r in Rating]},
                    "quadrant": {"type": "STRING", "enum": [q.value for q in Quadrant]},
                    "reasoning": _STRING,
                    "isParetoTop20": _BOOLEAN,
                },
                "required": ["id", "label", "quadrant", "reasoning", "isParetoTop20"],
            },
        },
        "paretoSummary": _STRING,
    },
    "required": ["items", "paretoSummary"],
}

WORKPLAN_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "issue": _STRING,
            "hypothesis": _STRING,
            "analysis": _STRING,
            "source": _STRING,
            "timing": _STRING,
        },
        "required": ["issue", "hypothesis", "analysis", "timing"],
    },
}

SYNTHESIS_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "synthesis": _STRING,
        "recommendation": {
            "type": "OBJECT",
            "properties": {
                "text": _STRING,
                "actionableSteps": _STRING_LIST,
                "stakeholders": _STRING_LIST,
                "resources": _STRING_LIST,
            },
            "required": ["text", "actionableSteps", "stakeholders", "resources"],
        },
    },
    "required": ["synthesis", "recommendation"],
}

RESPONSE_SCHEMAS: dict[GenerationStep, dict[str, Any]] = {
    GenerationStep.ANALYZE: ANALYSIS_SCHEMA,
    GenerationStep.STRUCTURE: ISSUE_TREE_SCHEMA,
    GenerationStep.PRIORITIZE: PRIORITIZATION_SCHEMA,
    GenerationStep.PLAN: WORKPLAN_SCHEMA,
    GenerationStep.SYNTHESIZE: SYNTHESIS_SCHEMA,
}


__all__ = [
    "ANALYSIS_SCHEMA",
    "ISSUE_TREE_SCHEMA",
    "PRIORITIZATION_SCHEMA",
    "WORKPLAN_SCHEMA",
    "SYNTHESIS_SCHEMA",
    "RESPONSE_SCHEMAS",
]
