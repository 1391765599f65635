"""Engine State Types.

Contains the state held by one conversation session:
- EngineState: phase, refinement flag, last breakdown type, evolve notes
- TurnResult: what a submit_* call did, returned to the caller
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from strategy_sdk.types import BreakdownType, Phase, StrategyError

logger = logging.getLogger(__name__)


@dataclass
class EngineState:
    """Mutable state of a single session (owned by its engine).

    Attributes:
        phase: Current phase
        refining: Next free-text input is feedback for the current phase
        loading: A generation call is in flight
        breakdown_type: Last breakdown type used for the issue tree
        evolve_notes: Extra context submitted after completion, oldest first
    """
    phase: Phase = Phase.DEFINE
    refining: bool = False
    loading: bool = False
    breakdown_type: Optional[BreakdownType] = None
    evolve_notes: list[str] = field(default_factory=list)

    def advance_to(self, phase: Phase) -> None:
        """Move forward exactly one phase.

        Raises:
            ValueError: If ``phase`` is not the immediate successor
        """
        if self.phase.next is not phase:
            raise ValueError(f"Illegal transition {self.phase.value} -> {phase.value}")
        logger.info(f"Phase {self.phase.value} -> {phase.value}")
        self.phase = phase

    def to_summary(self) -> dict:
        return {
            "phase": self.phase.value,
            "refining": self.refining,
            "loading": self.loading,
            "breakdown_type": self.breakdown_type.value if self.breakdown_type else None,
            "evolve_notes": len(self.evolve_notes),
        }


@dataclass
class TurnResult:
    """Outcome of one ``submit_text`` / ``submit_choice`` call.

    Attributes:
        handled: False when the call was a no-op (empty input, stale
            choice, busy session)
        error: The failure to log, if any; it has already been reported
            in the transcript where the user should see it
    """
    handled: bool
    error: Optional[StrategyError] = None

    @property
    def ok(self) -> bool:
        return self.handled and self.error is None


__all__ = ["EngineState", "TurnResult"]
