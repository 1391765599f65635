"""Input selection for the prioritize and plan steps."""

from __future__ import annotations

from typing import Iterable

from strategy_sdk.types import IssueTree, MatrixItem, Quadrant

MAX_PLAN_ISSUES = 5


def extract_issue_labels(tree: IssueTree) -> list[str]:
    """Issue-kind labels in pre-order (category before its issues, left to right).

    Categories without children contribute nothing.
    """
    return tree.issue_labels()


def select_plan_issues(items: Iterable[MatrixItem], limit: int = MAX_PLAN_ISSUES) -> list[str]:
    """Labels to plan for: Pareto top-20% or Quick Wins, in list order.

    Overlapping labels are not de-duplicated before truncation.
    """
    selected = [
        item.label
        for item in items
        if item.is_top20 or item.quadrant is Quadrant.QUICK_WINS
    ]
    return selected[:limit]


__all__ = ["MAX_PLAN_ISSUES", "extract_issue_labels", "select_plan_issues"]
