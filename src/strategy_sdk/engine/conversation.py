"""Conversation Engine for the Guided Strategy Session.

Drives one session through define → structure → prioritize → plan →
done, delegating every piece of reasoning to a GenerationGateway and
recording the results in a ReportModel and a TranscriptLog.

State Machine:
    DEFINE ──confirm──▶ STRUCTURE ──type──▶ (tree) ──confirm──▶ PRIORITIZE
                                                                  │
    DONE ◀──confirm── PLAN ◀──────────────confirm─────────────────┘
      │
      └── free text evolves the synthesis

    refine (any phase before DONE): the next free-text input is feedback,
    and the same phase's generation runs again.

Key Principles:
    - One generation call at a time; submit_* calls made while a call is
      in flight are rejected
    - A phase that needs a generation only advances once it succeeds
    - A failed generation leaves report, phase and refining untouched
      and is reported as an assistant message
    - Stale or unknown choices are no-ops, never exceptions
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, TypeVar

from strategy_sdk.types import (
    Action,
    BreakdownType,
    GenerationError,
    GenerationStep,
    MessageKind,
    NothingToPrioritizeError,
    Phase,
    ReportModel,
    Speaker,
    StateInconsistencyError,
    TranscriptLog,
    ValidationError,
)

from .actions import BREAKDOWN_ACTIONS, Choice, decision_actions, resolve_choice
from .hooks import EngineObserver
from .selection import extract_issue_labels, select_plan_issues
from .state import EngineState, TurnResult

if TYPE_CHECKING:
    from strategy_sdk.llm.gateway import GenerationGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConversationEngine:
    """Phase state machine for one guided session.

    Example:
        >>> engine = ConversationEngine(GeminiGateway())
        >>> await engine.submit_text("Revenue is down, need to fix it")
        >>> await engine.submit_choice("confirm_smart")
        >>> await engine.submit_choice("type_formulaic")
        >>> engine.phase
        <Phase.STRUCTURE: 'structure'>
    """

    def __init__(
        self,
        gateway: "GenerationGateway",
        *,
        observer: Optional[EngineObserver] = None,
        context: str = "",
    ) -> None:
        """Initialize engine with an empty report.

        Args:
            gateway: Generation gateway (GeminiGateway in production)
            observer: Receives loading / report-ready / prefill notifications
            context: Optional free-form context sent with the analysis step
        """
        self._gateway = gateway
        self._observer = observer or EngineObserver()
        self._context = context
        self._report = ReportModel()
        self._transcript = TranscriptLog()
        self._state = EngineState()

    @classmethod
    def resume(
        cls,
        gateway: "GenerationGateway",
        report: ReportModel,
        *,
        observer: Optional[EngineObserver] = None,
        context: str = "",
    ) -> ConversationEngine:
        """Build an engine in DONE from a finished report.

        Further text input evolves the report's synthesis.

        Raises:
            ValidationError: If the report has no synthesis
        """
        if report.synthesis is None:
            raise ValidationError("Only a report with a synthesis can be resumed")
        engine = cls(gateway, observer=observer, context=context)
        engine._report = copy.deepcopy(report)
        engine._state.phase = Phase.DONE
        return engine

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def refining(self) -> bool:
        return self._state.refining

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def awaiting_choice(self) -> bool:
        return bool(self._transcript.pending_actions())

    @property
    def is_complete(self) -> bool:
        """True once a synthesis exists (the full report can be shown)."""
        return self._report.synthesis is not None

    @property
    def transcript(self) -> TranscriptLog:
        return self._transcript

    @property
    def report(self) -> ReportModel:
        """Snapshot of the report (mutating it does not affect the engine)."""
        return self._report.snapshot()

    def pending_actions(self) -> list[Action]:
        return self._transcript.pending_actions()

    def to_summary(self) -> dict:
        summary = self._state.to_summary()
        summary.update(
            {
                "awaiting_choice": self.awaiting_choice,
                "messages": len(self._transcript),
                "complete": self.is_complete,
            }
        )
        return summary

    # =========================================================================
    # Public operations
    # =========================================================================

    async def submit_text(self, text: str) -> TurnResult:
        """Handle free-text input.

        Routing:
            - synthesis present: evolve the synthesis with the text as context
            - refining: regenerate the current phase with the text as feedback
            - DEFINE: treat the text as the problem statement
            - otherwise: ignored (a choice is expected)
        """
        if self._state.loading:
            return self._reject_busy("text")
        if not text or not text.strip():
            return TurnResult(handled=False, error=ValidationError("Input is empty"))

        if self._report.synthesis is not None:
            self._append_user(text)
            return await self._evolve(text)

        if self._state.refining:
            self._append_user(text)
            return await self._refine(text)

        if self._state.phase is Phase.DEFINE:
            offered = self._transcript.clear_actions()
            self._append_user(text)
            return await self._run_analysis(text, offered=offered)

        logger.info(f"Ignoring text input in phase {self._state.phase.value}; awaiting a choice")
        return TurnResult(
            handled=False,
            error=ValidationError("Choose one of the offered actions to continue"),
        )

    async def submit_choice(self, action_value: str) -> TurnResult:
        """Handle a selected action.

        Pending actions are cleared first. A value that means nothing in
        the current phase (or while refining) is a logged no-op.
        """
        if self._state.loading:
            return self._reject_busy("choice")

        phase = self._state.phase
        choice = None if self._state.refining else resolve_choice(phase, action_value)
        if choice is None or not self._choice_applicable(choice):
            logger.warning(f"Ignoring stale or unknown action {action_value!r} in {phase.value}")
            return TurnResult(
                handled=False,
                error=StateInconsistencyError(str(action_value), phase.value),
            )

        offered = self._transcript.clear_actions()

        if choice is Choice.REFINE:
            return self._enter_refining()

        if phase is Phase.DEFINE:
            return self._confirm_definition()
        if phase is Phase.STRUCTURE:
            if choice.breakdown_type is not None:
                return await self._choose_breakdown(choice.breakdown_type, offered)
            return await self._confirm_structure(offered)
        if phase is Phase.PRIORITIZE:
            return await self._confirm_prioritization(offered)
        return await self._confirm_plan(offered)

    # =========================================================================
    # Dispatch helpers
    # =========================================================================

    def _choice_applicable(self, choice: Choice) -> bool:
        """Whether the artifact a choice acts on exists yet."""
        phase = self._state.phase
        if choice.breakdown_type is not None:
            return phase is Phase.STRUCTURE
        required = {
            Phase.DEFINE: self._report.analysis,
            Phase.STRUCTURE: self._report.issue_tree,
            Phase.PRIORITIZE: self._report.prioritization,
            Phase.PLAN: self._report.workplan,
        }
        return required.get(phase) is not None

    def _reject_busy(self, what: str) -> TurnResult:
        logger.warning(f"Rejected {what} input: a generation call is in flight")
        return TurnResult(handled=False, error=ValidationError("A generation is already running"))

    def _enter_refining(self) -> TurnResult:
        phase = self._state.phase
        self._state.refining = True
        prompts = {
            Phase.DEFINE: "Understood. What aspects of the objective need adjustment?",
            Phase.STRUCTURE: "How should we pivot the breakdown?",
            Phase.PRIORITIZE: "Which areas should we prioritize instead?",
            Phase.PLAN: "What should we change in the plan?",
        }
        self._append_assistant(prompts[phase])
        logger.info(f"Refining {phase.value}")

        if phase is Phase.DEFINE and self._report.analysis:
            self._observer.on_input_prefill(self._report.analysis.improved_statement)
        return TurnResult(handled=True)

    def _confirm_definition(self) -> TurnResult:
        self._append_user("Confirmed. Proceed to structure.")
        self._advance(Phase.STRUCTURE)
        self._append_assistant(
            "Phase 2: **Structure**. How should we break down this challenge?",
            actions=BREAKDOWN_ACTIONS,
        )
        return TurnResult(handled=True)

    async def _choose_breakdown(
        self, breakdown_type: BreakdownType, offered: list[Action]
    ) -> TurnResult:
        label = "Formulaic" if breakdown_type is BreakdownType.FORMULAIC else "Thematic"
        self._append_user(f"{label} breakdown")
        return await self._run_structure(breakdown_type, offered=offered)

    async def _confirm_structure(self, offered: list[Action]) -> TurnResult:
        issues = extract_issue_labels(self._report.issue_tree)
        if not issues:
            error = NothingToPrioritizeError()
            self._append_assistant(error.message, actions=offered)
            return TurnResult(handled=True, error=error)

        self._append_user("Structure verified.")
        return await self._run_prioritization(issues, advance=True, offered=offered)

    async def _confirm_prioritization(self, offered: list[Action]) -> TurnResult:
        issues = select_plan_issues(self._report.prioritization.items)
        if not issues:
            error = ValidationError("No high-priority issues were identified to plan for.")
            self._append_assistant(error.message, actions=offered)
            return TurnResult(handled=True, error=error)

        self._append_user("Priorities approved.")
        return await self._run_plan(issues, advance=True, offered=offered)

    async def _confirm_plan(self, offered: list[Action]) -> TurnResult:
        self._append_user("Plan approved.")

        def commit(synthesis: Any) -> None:
            self._report.synthesis = synthesis
            self._advance(Phase.DONE)
            self._append_assistant(
                "Strategic intent synthesized. You can now access the full report "
                "or continue refining logic below.",
                kind=MessageKind.SYNTHESIS_RESULT,
                payload=synthesis,
            )
            self._observer.on_report_ready(self._report.snapshot())

        return await self._generate(
            GenerationStep.SYNTHESIZE,
            lambda: self._gateway.synthesize(self._report.effective_objective, ""),
            commit,
            offered=offered,
        )

    async def _refine(self, feedback: str) -> TurnResult:
        """Regenerate the current phase using ``feedback``."""
        phase = self._state.phase
        logger.info(f"Regenerating {phase.value} with feedback")

        if phase is Phase.DEFINE:
            return await self._run_analysis(feedback)
        if phase is Phase.STRUCTURE:
            breakdown_type = self._state.breakdown_type or BreakdownType.THEMATIC
            return await self._run_structure(breakdown_type, feedback=feedback)
        if phase is Phase.PRIORITIZE:
            issues = extract_issue_labels(self._report.issue_tree)
            return await self._run_prioritization(issues, feedback=feedback)
        issues = select_plan_issues(self._report.prioritization.items)
        return await self._run_plan(issues, feedback=feedback)

    async def _evolve(self, text: str) -> TurnResult:
        # Every earlier note is resent; the new synthesis replaces the old one.
        notes = self._state.evolve_notes + [text.strip()]
        context = "Additional Context:\n" + "\n".join(f"- {note}" for note in notes)

        def commit(synthesis: Any) -> None:
            self._report.synthesis = synthesis
            self._state.evolve_notes = notes
            self._append_assistant(
                "Strategy evolved. Core recommendations updated.",
                kind=MessageKind.SYNTHESIS_RESULT,
                payload=synthesis,
            )
            self._observer.on_report_ready(self._report.snapshot())

        return await self._generate(
            GenerationStep.SYNTHESIZE,
            lambda: self._gateway.synthesize(self._report.effective_objective, context),
            commit,
        )

    # =========================================================================
    # Phase generations
    # =========================================================================

    async def _run_analysis(
        self, problem: str, offered: Optional[list[Action]] = None
    ) -> TurnResult:
        def commit(analysis: Any) -> None:
            self._report.original_problem = problem
            self._report.analysis = analysis
            self._state.refining = False
            self._append_assistant(
                "Refining objective parameters for analytical precision:",
                kind=MessageKind.ANALYSIS_RESULT,
                payload=analysis,
                actions=decision_actions(Phase.DEFINE, "Proceed", "Refine Definition"),
            )

        return await self._generate(
            GenerationStep.ANALYZE,
            lambda: self._gateway.analyze(problem, self._context),
            commit,
            offered=offered,
        )

    async def _run_structure(
        self,
        breakdown_type: BreakdownType,
        feedback: str = "",
        offered: Optional[list[Action]] = None,
    ) -> TurnResult:
        def commit(tree: Any) -> None:
            self._report.issue_tree = tree
            self._state.breakdown_type = breakdown_type
            self._state.refining = False
            self._append_assistant(
                "Revised logic map:"
                if feedback
                else "I have deconstructed your challenge into a logical pyramid of drivers:",
                kind=MessageKind.TREE_RESULT,
                payload=tree,
            )
            self._append_assistant(
                "Does this structured breakdown align with your mental model?",
                actions=decision_actions(
                    Phase.STRUCTURE, "Yes, Prioritize Now", "Refine Structure"
                ),
            )

        return await self._generate(
            GenerationStep.STRUCTURE,
            lambda: self._gateway.structure(
                self._report.effective_objective, breakdown_type, feedback
            ),
            commit,
            offered=offered,
        )

    async def _run_prioritization(
        self,
        issues: list[str],
        feedback: str = "",
        advance: bool = False,
        offered: Optional[list[Action]] = None,
    ) -> TurnResult:
        def commit(prioritization: Any) -> None:
            self._report.prioritization = prioritization
            self._state.refining = False
            if advance:
                self._advance(Phase.PRIORITIZE)
            self._append_assistant(
                "Revised prioritization:"
                if feedback
                else "Applying the 80/20 rule to identify the high-impact factors:",
                kind=MessageKind.MATRIX_RESULT,
                payload=prioritization,
            )
            self._append_assistant(
                "Are these the right levers for 80% impact?",
                actions=decision_actions(Phase.PRIORITIZE, "Generate Plan", "Adjust Focus"),
            )

        return await self._generate(
            GenerationStep.PRIORITIZE,
            lambda: self._gateway.prioritize(issues, feedback),
            commit,
            offered=offered,
        )

    async def _run_plan(
        self,
        issues: list[str],
        feedback: str = "",
        advance: bool = False,
        offered: Optional[list[Action]] = None,
    ) -> TurnResult:
        def commit(workplan: Any) -> None:
            self._report.workplan = workplan
            self._state.refining = False
            if advance:
                self._advance(Phase.PLAN)
            self._append_assistant(
                "Revised action plan:"
                if feedback
                else "I have constructed a hypothesis-led action plan for the priority issues:",
                kind=MessageKind.WORKPLAN_RESULT,
                payload=workplan,
            )
            self._append_assistant(
                "Ready to finalize recommendations?",
                actions=decision_actions(Phase.PLAN, "Final Synthesis", "Refine Plan"),
            )

        return await self._generate(
            GenerationStep.PLAN,
            lambda: self._gateway.plan(issues, feedback),
            commit,
            offered=offered,
        )

    async def _generate(
        self,
        step: GenerationStep,
        call: Callable[[], Awaitable[T]],
        commit: Callable[[T], None],
        offered: Optional[list[Action]] = None,
    ) -> TurnResult:
        """Run one gateway call and commit its result.

        ``commit`` runs only on success and performs every report,
        state and transcript change for the turn in one synchronous
        block. On failure only an error message is appended, re-offering
        ``offered`` so the same choice can be retried.
        """
        self._set_loading(True)
        try:
            result = await call()
        except GenerationError as e:
            logger.error(f"{step.display_name} failed in phase {self._state.phase.value}: {e}")
            self._append_assistant(
                f"{step.display_name} failed. Please try again.",
                actions=offered or None,
            )
            return TurnResult(handled=True, error=e)
        finally:
            self._set_loading(False)

        commit(result)
        return TurnResult(handled=True)

    # =========================================================================
    # Low-level helpers
    # =========================================================================

    def _advance(self, phase: Phase) -> None:
        self._state.advance_to(phase)
        self._observer.on_phase_changed(phase)

    def _set_loading(self, loading: bool) -> None:
        self._state.loading = loading
        self._observer.on_loading_changed(loading)

    def _append_user(self, text: str) -> None:
        self._transcript.append(Speaker.USER, text)

    def _append_assistant(
        self,
        text: str,
        kind: MessageKind = MessageKind.PLAIN_TEXT,
        payload: Optional[Any] = None,
        actions: Optional[list[Action]] = None,
    ) -> None:
        self._transcript.append(Speaker.ASSISTANT, text, kind=kind, payload=payload, actions=actions)


__all__ = ["ConversationEngine"]
