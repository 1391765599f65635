"""Test configuration for strategy-sdk."""
import copy
import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from strategy_sdk.types import (
    Analysis,
    GenerationError,
    GenerationStep,
    IssueNode,
    IssueTree,
    MatrixItem,
    NodeKind,
    PrioritizationResult,
    Quadrant,
    Rating,
    Recommendation,
    Synthesis,
    WorkplanItem,
)

IMPROVED_STATEMENT = "Increase Q4 revenue by 15% within 90 days"


def build_analysis(improved: str = IMPROVED_STATEMENT) -> Analysis:
    return Analysis(
        specific=False,
        measurable=False,
        actionable=True,
        relevant=True,
        time_bound=False,
        feedback="Add a target and a deadline.",
        improved_statement=improved,
        stakeholders=["CFO", "Sales"],
        challenger_questions=["Is the drop seasonal?"],
    )


def build_tree(root_label: str = IMPROVED_STATEMENT) -> IssueTree:
    def issue(node_id: str, label: str) -> IssueNode:
        return IssueNode(id=node_id, label=label, kind=NodeKind.ISSUE)

    return IssueTree(
        root=IssueNode(
            id="root",
            label=root_label,
            kind=NodeKind.ROOT,
            children=[
                IssueNode(
                    id="c1",
                    label="Volume",
                    kind=NodeKind.CATEGORY,
                    children=[issue("i1", "New customers"), issue("i2", "Churn")],
                ),
                IssueNode(
                    id="c2",
                    label="Price",
                    kind=NodeKind.CATEGORY,
                    children=[issue("i3", "Discounting")],
                ),
            ],
        ),
        mece_explanation="Revenue = volume x price.",
    )


def build_prioritization(labels=("New customers", "Churn", "Discounting")) -> PrioritizationResult:
    quadrants = [Quadrant.QUICK_WINS, Quadrant.MAJOR_PROJECTS, Quadrant.FILL_INS]
    items = [
        MatrixItem(
            id=f"p{index}",
            label=label,
            quadrant=quadrants[index % len(quadrants)],
            reasoning="...",
            is_top20=index == 1,
            impact=Rating.HIGH,
            effort=Rating.LOW,
        )
        for index, label in enumerate(labels)
    ]
    return PrioritizationResult(items=items, summary="Two levers drive most of the gap.")


def build_workplan(issues=("New customers", "Churn")) -> list:
    return [
        WorkplanItem(
            issue=issue,
            hypothesis=f"{issue} explains the gap",
            analysis="Cohort analysis",
            timing="Week 1-2",
        )
        for issue in issues
    ]


def build_synthesis(text: str = "Win back churned accounts first.") -> Synthesis:
    return Synthesis(
        summary="Revenue fell because of churn.",
        recommendation=Recommendation(
            text=text,
            actionable_steps=["Call top 20 churned accounts"],
            stakeholders=["Sales"],
            resources=["CRM export"],
        ),
    )


class FakeGateway:
    """Scripted GenerationGateway that records every call.

    Set ``fail`` to a set of operation names to make them raise
    GenerationError; assign the result attributes to change outputs.
    """

    _STEPS = {
        "analyze": GenerationStep.ANALYZE,
        "structure": GenerationStep.STRUCTURE,
        "prioritize": GenerationStep.PRIORITIZE,
        "plan": GenerationStep.PLAN,
        "synthesize": GenerationStep.SYNTHESIZE,
    }

    def __init__(self):
        self.calls = []
        self.fail = set()
        self.analysis = build_analysis()
        self.tree = build_tree()
        self.prioritization = build_prioritization()
        self.workplan = build_workplan()
        self.synthesis = build_synthesis()

    def calls_to(self, name):
        return [kwargs for op, kwargs in self.calls if op == name]

    def _respond(self, name, result, **kwargs):
        self.calls.append((name, kwargs))
        if name in self.fail:
            raise GenerationError(self._STEPS[name], RuntimeError("service unavailable"))
        return copy.deepcopy(result)

    async def analyze(self, problem, context=""):
        return self._respond("analyze", self.analysis, problem=problem, context=context)

    async def structure(self, objective, breakdown_type, feedback=""):
        return self._respond(
            "structure",
            self.tree,
            objective=objective,
            breakdown_type=breakdown_type,
            feedback=feedback,
        )

    async def prioritize(self, issues, feedback=""):
        return self._respond("prioritize", self.prioritization, issues=list(issues), feedback=feedback)

    async def plan(self, issues, feedback=""):
        return self._respond("plan", self.workplan, issues=list(issues), feedback=feedback)

    async def synthesize(self, objective, context=""):
        return self._respond("synthesize", self.synthesis, objective=objective, context=context)


@pytest.fixture
def gateway():
    """Scripted gateway with a happy-path script."""
    return FakeGateway()


@pytest.fixture
def sample_problem():
    """Sample problem statement for testing."""
    return "Revenue is down, need to fix it"
