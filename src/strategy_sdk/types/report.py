"""Strategy Types - Report Model.

The accumulating record of one session's artifacts. Every structure here
serializes with the same camelCase keys the model returns, so a parsed
response, a persisted report and a resumed report share one format.

Fields that only some prompt versions produce (``source``,
``identifiedBiases``, ``recommendedApproach``, ``meceExplanation``) are
optional attributes, not separate types.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from .enums import NodeKind, Quadrant, Rating


def _text(data: dict, key: str, default: str = "") -> str:
    value = data.get(key)
    if value is None:
        return default
    return str(value)


def _required_text(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"missing required text field '{key}'")
    return value


def _text_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v is not None and str(v).strip()]


# =============================================================================
# Phase 1: Analysis
# =============================================================================


@dataclass
class Analysis:
    """SMART evaluation of the objective.

    Attributes:
        specific/measurable/actionable/relevant/time_bound: SMART flags
        feedback: Free-text critique of the original statement
        improved_statement: Canonical restated objective used by all
            later phases
        stakeholders: Potential stakeholders
        challenger_questions: Questions that stress-test the objective
        identified_biases: Framing biases spotted in the statement
        recommended_approach: Suggested way to attack the problem
    """
    specific: bool
    measurable: bool
    actionable: bool
    relevant: bool
    time_bound: bool
    feedback: str
    improved_statement: str
    stakeholders: list[str] = field(default_factory=list)
    challenger_questions: list[str] = field(default_factory=list)
    identified_biases: list[str] = field(default_factory=list)
    recommended_approach: Optional[str] = None

    @property
    def smart_score(self) -> int:
        """Number of SMART criteria met (0-5)."""
        return sum(
            [self.specific, self.measurable, self.actionable, self.relevant, self.time_bound]
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "isSpecific": self.specific,
            "isMeasurable": self.measurable,
            "isActionable": self.actionable,
            "isRelevant": self.relevant,
            "isTimeBound": self.time_bound,
            "feedback": self.feedback,
            "improvedStatement": self.improved_statement,
            "potentialStakeholders": list(self.stakeholders),
            "challengerQuestions": list(self.challenger_questions),
            "identifiedBiases": list(self.identified_biases),
            "recommendedApproach": self.recommended_approach,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Analysis:
        """Create from dictionary (JSON deserialization)."""
        return cls(
            specific=bool(data.get("isSpecific", False)),
            measurable=bool(data.get("isMeasurable", False)),
            actionable=bool(data.get("isActionable", False)),
            relevant=bool(data.get("isRelevant", False)),
            time_bound=bool(data.get("isTimeBound", False)),
            feedback=_text(data, "feedback"),
            improved_statement=_required_text(data, "improvedStatement"),
            stakeholders=_text_list(data.get("potentialStakeholders")),
            challenger_questions=_text_list(data.get("challengerQuestions")),
            identified_biases=_text_list(data.get("identifiedBiases")),
            recommended_approach=data.get("recommendedApproach") or None,
        )


# =============================================================================
# Phase 2: Issue tree
# =============================================================================


@dataclass
class IssueNode:
    """Node of the issue tree.

    Children are owned by value; there are no parent back-references,
    so a node can never appear twice in one tree.
    """
    id: str
    label: str
    kind: NodeKind
    explanation: Optional[str] = None
    children: list[IssueNode] = field(default_factory=list)

    def walk(self) -> Iterator[IssueNode]:
        """Pre-order traversal: node first, then children left to right."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.kind.value,
        }
        if self.explanation is not None:
            data["explanation"] = self.explanation
        if self.children or self.kind is not NodeKind.ISSUE:
            data["children"] = [child.to_dict() for child in self.children]
        return data

    @classmethod
    def from_dict(cls, data: dict, depth: int = 0, path: str = "0") -> IssueNode:
        """Create from dictionary (JSON deserialization).

        A missing or unknown ``type`` is inferred from depth; a missing
        ``id`` is derived from the node's position.
        """
        if not isinstance(data, dict):
            raise ValueError(f"tree node at {path} is not an object")
        try:
            kind = NodeKind(str(data.get("type", "")).strip().lower())
        except ValueError:
            kind = NodeKind.for_depth(depth)

        children = [
            cls.from_dict(child, depth + 1, f"{path}.{index}")
            for index, child in enumerate(data.get("children") or [])
        ]
        return cls(
            id=_text(data, "id") or f"node-{path}",
            label=_required_text(data, "label"),
            kind=kind,
            explanation=data.get("explanation") or None,
            children=children,
        )


@dataclass
class IssueTree:
    """Rooted root/category/issue tree plus the MECE rationale."""
    root: IssueNode
    mece_explanation: str = ""

    def walk(self) -> Iterator[IssueNode]:
        return self.root.walk()

    def issue_labels(self) -> list[str]:
        """Labels of issue-kind nodes in deterministic pre-order."""
        return [node.label for node in self.walk() if node.kind is NodeKind.ISSUE]

    def find(self, node_id: str) -> Optional[IssueNode]:
        for node in self.walk():
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "root": self.root.to_dict(),
            "meceExplanation": self.mece_explanation,
        }

    @classmethod
    def from_dict(cls, data: dict) -> IssueTree:
        """Create from dictionary, making node ids unique within the tree."""
        root_data = data.get("root")
        if root_data is None:
            raise ValueError("issue tree has no root")
        root = IssueNode.from_dict(root_data)

        seen: set[str] = set()
        for node in root.walk():
            if node.id in seen:
                suffix = 2
                while f"{node.id}-{suffix}" in seen:
                    suffix += 1
                node.id = f"{node.id}-{suffix}"
            seen.add(node.id)

        return cls(root=root, mece_explanation=_text(data, "meceExplanation"))


# =============================================================================
# Phase 3: Prioritization
# =============================================================================


@dataclass
class MatrixItem:
    """One issue placed on the impact/effort matrix."""
    id: str
    label: str
    quadrant: Quadrant
    reasoning: str = ""
    is_top20: bool = False
    impact: Optional[Rating] = None
    effort: Optional[Rating] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "label": self.label,
            "impact": self.impact.value if self.impact else None,
            "effort": self.effort.value if self.effort else None,
            "quadrant": self.quadrant.value,
            "reasoning": self.reasoning,
            "isParetoTop20": self.is_top20,
        }

    @classmethod
    def from_dict(cls, data: dict) -> MatrixItem:
        """Create from dictionary (JSON deserialization).

        An unrecognized quadrant is derived from impact/effort when both
        ratings are present.
        """
        impact = Rating.parse(data.get("impact"))
        effort = Rating.parse(data.get("effort"))
        quadrant = Quadrant.parse(data.get("quadrant"))
        if quadrant is None:
            if impact is None or effort is None:
                raise ValueError(f"unknown quadrant {data.get('quadrant')!r}")
            quadrant = Quadrant.from_ratings(impact, effort)

        label = _required_text(data, "label")
        return cls(
            id=_text(data, "id") or label,
            label=label,
            quadrant=quadrant,
            reasoning=_text(data, "reasoning"),
            is_top20=bool(data.get("isParetoTop20", False)),
            impact=impact,
            effort=effort,
        )


@dataclass
class PrioritizationResult:
    """Prioritized issues plus the Pareto summary."""
    items: list[MatrixItem]
    summary: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "items": [item.to_dict() for item in self.items],
            "paretoSummary": self.summary,
        }

    @classmethod
    def from_dict(cls, data: dict) -> PrioritizationResult:
        """Create from dictionary (JSON deserialization)."""
        return cls(
            items=[MatrixItem.from_dict(item) for item in data.get("items") or []],
            summary=_text(data, "paretoSummary"),
        )


# =============================================================================
# Phase 4: Workplan
# =============================================================================


@dataclass
class WorkplanItem:
    """Hypothesis-driven plan entry for one priority issue."""
    issue: str
    hypothesis: str
    analysis: str
    timing: str
    source: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "issue": self.issue,
            "hypothesis": self.hypothesis,
            "analysis": self.analysis,
            "source": self.source,
            "timing": self.timing,
        }

    @classmethod
    def from_dict(cls, data: dict) -> WorkplanItem:
        """Create from dictionary (JSON deserialization)."""
        return cls(
            issue=_required_text(data, "issue"),
            hypothesis=_text(data, "hypothesis"),
            analysis=_text(data, "analysis"),
            timing=_text(data, "timing"),
            source=data.get("source") or None,
        )


# =============================================================================
# Phase 5: Synthesis
# =============================================================================


@dataclass
class Recommendation:
    text: str
    actionable_steps: list[str] = field(default_factory=list)
    stakeholders: list[str] = field(default_factory=list)
    resources: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "text": self.text,
            "actionableSteps": list(self.actionable_steps),
            "stakeholders": list(self.stakeholders),
            "resources": list(self.resources),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Recommendation:
        """Create from dictionary (JSON deserialization)."""
        return cls(
            text=_required_text(data, "text"),
            actionable_steps=_text_list(data.get("actionableSteps")),
            stakeholders=_text_list(data.get("stakeholders")),
            resources=_text_list(data.get("resources")),
        )


@dataclass
class Synthesis:
    """Answer-first synthesis and the single recommendation."""
    summary: str
    recommendation: Recommendation

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "synthesis": self.summary,
            "recommendation": self.recommendation.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Synthesis:
        """Create from dictionary (JSON deserialization)."""
        recommendation = data.get("recommendation")
        if not isinstance(recommendation, dict):
            raise ValueError("synthesis has no recommendation")
        return cls(
            summary=_required_text(data, "synthesis"),
            recommendation=Recommendation.from_dict(recommendation),
        )


# =============================================================================
# Report
# =============================================================================


@dataclass
class ReportModel:
    """Accumulating record of one session.

    Owned by the conversation engine, which only ever replaces whole
    fields. Rendering code should read a ``snapshot()``.
    """
    original_problem: str = ""
    analysis: Optional[Analysis] = None
    issue_tree: Optional[IssueTree] = None
    prioritization: Optional[PrioritizationResult] = None
    workplan: Optional[list[WorkplanItem]] = None
    synthesis: Optional[Synthesis] = None

    @property
    def effective_objective(self) -> str:
        """Improved statement when available, else the raw problem."""
        if self.analysis and self.analysis.improved_statement:
            return self.analysis.improved_statement
        return self.original_problem

    @property
    def is_complete(self) -> bool:
        return self.synthesis is not None

    def snapshot(self) -> ReportModel:
        """Deep copy safe to hand to rendering code."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "originalProblem": self.original_problem,
            "smartAnalysis": self.analysis.to_dict() if self.analysis else None,
            "issueTree": self.issue_tree.to_dict() if self.issue_tree else None,
            "prioritization": self.prioritization.to_dict() if self.prioritization else None,
            "workplan": (
                [item.to_dict() for item in self.workplan]
                if self.workplan is not None
                else None
            ),
            "synthesis": self.synthesis.to_dict() if self.synthesis else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ReportModel:
        """Create from dictionary (JSON deserialization)."""
        analysis = data.get("smartAnalysis")
        tree = data.get("issueTree")
        prioritization = data.get("prioritization")
        workplan = data.get("workplan")
        synthesis = data.get("synthesis")
        return cls(
            original_problem=_text(data, "originalProblem"),
            analysis=Analysis.from_dict(analysis) if analysis else None,
            issue_tree=IssueTree.from_dict(tree) if tree else None,
            prioritization=(
                PrioritizationResult.from_dict(prioritization) if prioritization else None
            ),
            workplan=(
                [WorkplanItem.from_dict(item) for item in workplan]
                if workplan is not None
                else None
            ),
            synthesis=Synthesis.from_dict(synthesis) if synthesis else None,
        )


__all__ = [
    "Analysis",
    "IssueNode",
    "IssueTree",
    "MatrixItem",
    "PrioritizationResult",
    "WorkplanItem",
    "Recommendation",
    "Synthesis",
    "ReportModel",
]
