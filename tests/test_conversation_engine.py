"""Tests for ConversationEngine."""

import asyncio

import pytest

from conftest import IMPROVED_STATEMENT, FakeGateway, build_synthesis
from strategy_sdk.engine import ConversationEngine, EngineObserver
from strategy_sdk.types import (
    BreakdownType,
    GenerationError,
    IssueNode,
    IssueTree,
    MessageKind,
    NodeKind,
    NothingToPrioritizeError,
    Phase,
    ReportModel,
    Speaker,
    StateInconsistencyError,
    ValidationError,
)


class RecordingObserver(EngineObserver):
    def __init__(self):
        self.loading = []
        self.phases = []
        self.reports = []
        self.prefills = []

    def on_loading_changed(self, loading):
        self.loading.append(loading)

    def on_phase_changed(self, phase):
        self.phases.append(phase)

    def on_report_ready(self, report):
        self.reports.append(report)

    def on_input_prefill(self, text):
        self.prefills.append(text)


async def engine_at(phase, gateway, observer=None):
    """Drive a fresh engine forward to ``phase`` on the happy path."""
    engine = ConversationEngine(gateway, observer=observer)
    await engine.submit_text("Revenue is down, need to fix it")
    steps = {
        Phase.STRUCTURE: ["confirm_smart"],
        Phase.PRIORITIZE: ["confirm_smart", "type_formulaic", "confirm_tree"],
        Phase.PLAN: ["confirm_smart", "type_formulaic", "confirm_tree", "confirm_prioritization"],
        Phase.DONE: [
            "confirm_smart",
            "type_formulaic",
            "confirm_tree",
            "confirm_prioritization",
            "confirm_plan",
        ],
    }
    for value in steps.get(phase, []):
        result = await engine.submit_choice(value)
        assert result.ok, value
    assert engine.phase is phase
    return engine


class TestEmptyInput:
    """Empty or whitespace input is ignored."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_text_is_noop(self, gateway, text):
        engine = ConversationEngine(gateway)
        result = await engine.submit_text(text)

        assert result.handled is False
        assert isinstance(result.error, ValidationError)
        assert len(engine.transcript) == 0
        assert engine.phase is Phase.DEFINE
        assert gateway.calls == []


class TestHappyPath:
    """Full session from problem statement to synthesis."""

    @pytest.mark.asyncio
    async def test_end_to_end(self, gateway, sample_problem):
        engine = ConversationEngine(gateway)

        await engine.submit_text(sample_problem)
        assert engine.phase is Phase.DEFINE
        assert engine.report.analysis.improved_statement == IMPROVED_STATEMENT
        assert engine.report.original_problem == sample_problem
        assert [a.value for a in engine.pending_actions()] == ["confirm_smart", "refine_smart"]

        await engine.submit_choice("confirm")
        assert engine.phase is Phase.STRUCTURE
        assert [a.value for a in engine.pending_actions()] == ["type_formulaic", "type_thematic"]

        await engine.submit_choice("formulaic")
        tree = engine.report.issue_tree
        assert tree.root.label == IMPROVED_STATEMENT
        assert len(tree.root.children) == 2
        assert all(category.children for category in tree.root.children)
        assert gateway.calls_to("structure")[0]["objective"] == IMPROVED_STATEMENT
        assert gateway.calls_to("structure")[0]["breakdown_type"] is BreakdownType.FORMULAIC

        await engine.submit_choice("confirm_tree")
        assert engine.phase is Phase.PRIORITIZE
        assert gateway.calls_to("prioritize")[0]["issues"] == [
            "New customers",
            "Churn",
            "Discounting",
        ]

        await engine.submit_choice("confirm_prioritization")
        assert engine.phase is Phase.PLAN
        assert gateway.calls_to("plan")[0]["issues"] == ["New customers", "Churn"]

        await engine.submit_choice("confirm_plan")
        assert engine.phase is Phase.DONE
        assert engine.is_complete
        assert engine.report.synthesis.recommendation.text
        assert gateway.calls_to("synthesize")[0] == {
            "objective": IMPROVED_STATEMENT,
            "context": "",
        }
        assert engine.pending_actions() == []

    @pytest.mark.asyncio
    async def test_analysis_uses_engine_context(self, gateway):
        engine = ConversationEngine(gateway, context="B2B SaaS, 40 employees")
        await engine.submit_text("Revenue is down")
        assert gateway.calls_to("analyze")[0]["context"] == "B2B SaaS, 40 employees"

    @pytest.mark.asyncio
    async def test_phases_only_move_forward(self, gateway):
        observer = RecordingObserver()
        await engine_at(Phase.DONE, gateway, observer)
        assert observer.phases == [Phase.STRUCTURE, Phase.PRIORITIZE, Phase.PLAN, Phase.DONE]

    @pytest.mark.asyncio
    async def test_transcript_message_kinds(self, gateway):
        engine = await engine_at(Phase.DONE, gateway)
        kinds = [m.kind for m in engine.transcript if m.speaker is Speaker.ASSISTANT]
        assert MessageKind.ANALYSIS_RESULT in kinds
        assert MessageKind.TREE_RESULT in kinds
        assert MessageKind.MATRIX_RESULT in kinds
        assert MessageKind.WORKPLAN_RESULT in kinds
        assert kinds[-1] is MessageKind.SYNTHESIS_RESULT

    @pytest.mark.asyncio
    async def test_only_latest_message_has_actions(self, gateway):
        engine = await engine_at(Phase.PLAN, gateway)
        with_actions = [m for m in engine.transcript if m.pending_actions]
        assert len(with_actions) == 1
        assert with_actions[0] is engine.transcript.last

    @pytest.mark.asyncio
    async def test_objective_falls_back_to_original_problem(self, gateway):
        gateway.analysis.improved_statement = ""
        engine = ConversationEngine(gateway)
        await engine.submit_text("Reduce churn")
        await engine.submit_choice("confirm")
        await engine.submit_choice("thematic")
        assert gateway.calls_to("structure")[0]["objective"] == "Reduce churn"


class TestRefinement:
    """Refine re-runs the same phase with the user's feedback."""

    @pytest.mark.asyncio
    async def test_refine_definition(self, gateway):
        observer = RecordingObserver()
        engine = await engine_at(Phase.DEFINE, gateway, observer)

        await engine.submit_choice("refine_smart")
        assert engine.refining
        assert observer.prefills == [IMPROVED_STATEMENT]
        assert engine.pending_actions() == []

        result = await engine.submit_text("Grow revenue 10% in Q4")
        assert result.ok
        assert not engine.refining
        assert engine.phase is Phase.DEFINE
        assert gateway.calls_to("analyze")[-1]["problem"] == "Grow revenue 10% in Q4"
        assert engine.report.original_problem == "Grow revenue 10% in Q4"
        assert [a.value for a in engine.pending_actions()] == ["confirm_smart", "refine_smart"]

    @pytest.mark.asyncio
    async def test_refine_structure_reuses_breakdown_type(self, gateway):
        engine = await engine_at(Phase.STRUCTURE, gateway)
        await engine.submit_choice("type_formulaic")
        await engine.submit_choice("refine_tree")

        await engine.submit_text("Split price into list price and discount")
        last = gateway.calls_to("structure")[-1]
        assert last["breakdown_type"] is BreakdownType.FORMULAIC
        assert last["feedback"] == "Split price into list price and discount"
        assert engine.phase is Phase.STRUCTURE
        assert [a.value for a in engine.pending_actions()] == ["confirm_tree", "refine_tree"]

    @pytest.mark.asyncio
    async def test_refine_prioritization(self, gateway):
        engine = await engine_at(Phase.PRIORITIZE, gateway)
        await engine.submit_choice("refine")
        await engine.submit_text("Focus on retention")

        assert len(gateway.calls_to("prioritize")) == 2
        assert gateway.calls_to("prioritize")[-1]["feedback"] == "Focus on retention"
        assert engine.phase is Phase.PRIORITIZE

    @pytest.mark.asyncio
    async def test_refine_plan_regenerates_workplan(self, gateway):
        engine = await engine_at(Phase.PLAN, gateway)
        await engine.submit_choice("refine_plan")
        await engine.submit_text("Shorter timelines please")

        assert len(gateway.calls_to("plan")) == 2
        assert gateway.calls_to("plan")[-1]["feedback"] == "Shorter timelines please"
        assert gateway.calls_to("synthesize") == []
        assert engine.phase is Phase.PLAN
        assert not engine.is_complete

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "phase,operation",
        [
            (Phase.DEFINE, "analyze"),
            (Phase.PRIORITIZE, "prioritize"),
            (Phase.PLAN, "plan"),
        ],
    )
    async def test_refine_calls_same_phase_only(self, gateway, phase, operation):
        engine = await engine_at(phase, gateway)
        before = [op for op, _ in gateway.calls]

        await engine.submit_choice("refine")
        await engine.submit_text("feedback")

        new_calls = [op for op, _ in gateway.calls][len(before):]
        assert new_calls == [operation]

    @pytest.mark.asyncio
    async def test_choices_ignored_while_refining(self, gateway):
        engine = await engine_at(Phase.PRIORITIZE, gateway)
        await engine.submit_choice("refine_prioritization")

        result = await engine.submit_choice("confirm_prioritization")
        assert result.handled is False
        assert engine.phase is Phase.PRIORITIZE
        assert engine.refining


class TestStaleChoices:
    """Choices that do not fit the current state are no-ops."""

    @pytest.mark.asyncio
    async def test_other_phase_value_is_noop(self, gateway):
        engine = await engine_at(Phase.DEFINE, gateway)
        transcript_len = len(engine.transcript)

        result = await engine.submit_choice("confirm_tree")
        assert result.handled is False
        assert isinstance(result.error, StateInconsistencyError)
        assert engine.phase is Phase.DEFINE
        assert len(engine.transcript) == transcript_len
        assert engine.awaiting_choice

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["bogus", "", "type_formulaic"])
    async def test_unknown_value_in_define(self, gateway, value):
        engine = await engine_at(Phase.DEFINE, gateway)
        result = await engine.submit_choice(value)
        assert result.handled is False
        assert engine.phase is Phase.DEFINE

    @pytest.mark.asyncio
    async def test_confirm_before_any_analysis(self, gateway):
        engine = ConversationEngine(gateway)
        result = await engine.submit_choice("confirm")
        assert result.handled is False
        assert engine.phase is Phase.DEFINE

    @pytest.mark.asyncio
    async def test_confirm_tree_before_tree_exists(self, gateway):
        engine = await engine_at(Phase.STRUCTURE, gateway)
        result = await engine.submit_choice("confirm_tree")
        assert result.handled is False
        assert gateway.calls_to("prioritize") == []

    @pytest.mark.asyncio
    async def test_choices_in_done_are_noops(self, gateway):
        engine = await engine_at(Phase.DONE, gateway)
        for value in ["confirm", "refine", "confirm_plan"]:
            result = await engine.submit_choice(value)
            assert result.handled is False
        assert engine.phase is Phase.DONE

    @pytest.mark.asyncio
    async def test_text_ignored_while_awaiting_choice(self, gateway):
        engine = await engine_at(Phase.PRIORITIZE, gateway)
        transcript_len = len(engine.transcript)

        result = await engine.submit_text("what now?")
        assert result.handled is False
        assert len(engine.transcript) == transcript_len
        assert len(gateway.calls_to("prioritize")) == 1


class TestGenerationFailures:
    """A failed generation leaves state untouched and says so."""

    @pytest.mark.asyncio
    async def test_analysis_failure(self, gateway, sample_problem):
        gateway.fail = {"analyze"}
        engine = ConversationEngine(gateway)

        result = await engine.submit_text(sample_problem)
        assert result.handled
        assert isinstance(result.error, GenerationError)
        assert engine.phase is Phase.DEFINE
        assert engine.report.to_dict() == ReportModel().to_dict()
        last = engine.transcript.last
        assert last.speaker is Speaker.ASSISTANT
        assert last.kind is MessageKind.PLAIN_TEXT
        assert "Analysis" in last.text

        gateway.fail = set()
        retry = await engine.submit_text(sample_problem)
        assert retry.ok
        assert engine.report.analysis is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "phase,value,operation",
        [
            (Phase.STRUCTURE, "type_thematic", "structure"),
            (Phase.PRIORITIZE, "confirm_prioritization", "plan"),
            (Phase.PLAN, "confirm_plan", "synthesize"),
        ],
    )
    async def test_choice_failure_keeps_state(self, gateway, phase, value, operation):
        engine = await engine_at(phase, gateway)
        report_before = engine.report.to_dict()
        offered_before = [a.value for a in engine.pending_actions()]
        gateway.fail = {operation}

        result = await engine.submit_choice(value)
        assert isinstance(result.error, GenerationError)
        assert engine.phase is phase
        assert not engine.refining
        assert engine.report.to_dict() == report_before
        assert [a.value for a in engine.pending_actions()] == offered_before

        gateway.fail = set()
        retry = await engine.submit_choice(value)
        assert retry.ok

    @pytest.mark.asyncio
    async def test_confirm_tree_failure_stays_in_structure(self, gateway):
        engine = await engine_at(Phase.STRUCTURE, gateway)
        await engine.submit_choice("type_formulaic")
        report_before = engine.report.to_dict()
        gateway.fail = {"prioritize"}

        result = await engine.submit_choice("confirm_tree")
        assert isinstance(result.error, GenerationError)
        assert engine.phase is Phase.STRUCTURE
        assert engine.report.to_dict() == report_before
        assert "Prioritization failed" in engine.transcript.last.text

        gateway.fail = set()
        await engine.submit_choice("confirm_tree")
        assert engine.phase is Phase.PRIORITIZE

    @pytest.mark.asyncio
    async def test_refine_failure_keeps_refining(self, gateway):
        engine = await engine_at(Phase.PLAN, gateway)
        await engine.submit_choice("refine_plan")
        report_before = engine.report.to_dict()
        gateway.fail = {"plan"}

        result = await engine.submit_text("Add a pilot")
        assert isinstance(result.error, GenerationError)
        assert engine.refining
        assert engine.report.to_dict() == report_before

        gateway.fail = set()
        assert (await engine.submit_text("Add a pilot")).ok
        assert not engine.refining

    @pytest.mark.asyncio
    async def test_failed_reanalysis_reoffers_on_latest_message(self, gateway, sample_problem):
        engine = ConversationEngine(gateway)
        await engine.submit_text(sample_problem)
        report_before = engine.report.to_dict()
        gateway.fail = {"analyze"}

        result = await engine.submit_text("Actually costs are up")
        assert isinstance(result.error, GenerationError)

        with_actions = [m for m in engine.transcript if m.pending_actions]
        assert with_actions == [engine.transcript.last]
        assert engine.transcript.last.speaker is Speaker.ASSISTANT
        assert [a.value for a in engine.pending_actions()] == ["confirm_smart", "refine_smart"]
        assert engine.report.to_dict() == report_before

        gateway.fail = set()
        assert (await engine.submit_choice("confirm_smart")).ok
        assert engine.phase is Phase.STRUCTURE

    @pytest.mark.asyncio
    async def test_loading_resets_after_failure(self, gateway):
        observer = RecordingObserver()
        gateway.fail = {"analyze"}
        engine = ConversationEngine(gateway, observer=observer)

        await engine.submit_text("anything")
        assert observer.loading == [True, False]
        assert not engine.loading


class TestNothingToPrioritize:
    """An issue tree without issue leaves never reaches the gateway."""

    @pytest.mark.asyncio
    async def test_empty_categories(self, gateway):
        gateway.tree = IssueTree(
            root=IssueNode(
                id="root",
                label=IMPROVED_STATEMENT,
                kind=NodeKind.ROOT,
                children=[IssueNode(id="c1", label="Volume", kind=NodeKind.CATEGORY)],
            )
        )
        engine = await engine_at(Phase.STRUCTURE, gateway)
        await engine.submit_choice("type_thematic")

        result = await engine.submit_choice("confirm_tree")
        assert isinstance(result.error, NothingToPrioritizeError)
        assert gateway.calls_to("prioritize") == []
        assert engine.phase is Phase.STRUCTURE
        assert "No issues found" in engine.transcript.last.text
        assert "refine_tree" in [a.value for a in engine.pending_actions()]


class TestEvolve:
    """After completion, text input evolves the synthesis."""

    @pytest.mark.asyncio
    async def test_evolve_replaces_synthesis(self, gateway):
        observer = RecordingObserver()
        engine = await engine_at(Phase.DONE, gateway, observer)
        gateway.synthesis = build_synthesis("Enter the EU market in Q1.")

        result = await engine.submit_text("Also consider EU market")
        assert result.ok
        call = gateway.calls_to("synthesize")[-1]
        assert call["objective"] == IMPROVED_STATEMENT
        assert "Also consider EU market" in call["context"]
        assert engine.report.synthesis.recommendation.text == "Enter the EU market in Q1."
        assert engine.phase is Phase.DONE
        assert len(observer.reports) == 2
        assert engine.transcript.last.kind is MessageKind.SYNTHESIS_RESULT

    @pytest.mark.asyncio
    async def test_evolve_accumulates_notes(self, gateway):
        engine = await engine_at(Phase.DONE, gateway)
        await engine.submit_text("Also consider EU market")
        await engine.submit_text("Budget is capped at $200k")

        context = gateway.calls_to("synthesize")[-1]["context"]
        assert context.index("Also consider EU market") < context.index("Budget is capped")

    @pytest.mark.asyncio
    async def test_failed_evolve_keeps_previous_synthesis(self, gateway):
        engine = await engine_at(Phase.DONE, gateway)
        before = engine.report.to_dict()
        gateway.fail = {"synthesize"}

        result = await engine.submit_text("Also consider EU market")
        assert isinstance(result.error, GenerationError)
        assert engine.report.to_dict() == before

        gateway.fail = set()
        await engine.submit_text("Budget is capped")
        assert "Also consider EU market" not in gateway.calls_to("synthesize")[-1]["context"]


class TestResume:
    """Resuming a finished report."""

    @pytest.mark.asyncio
    async def test_resume_from_finished_report(self, gateway):
        finished = (await engine_at(Phase.DONE, gateway)).report
        restored = ReportModel.from_dict(finished.to_dict())

        engine = ConversationEngine.resume(FakeGateway(), restored)
        assert engine.phase is Phase.DONE
        assert not engine.refining
        assert engine.is_complete
        assert (await engine.submit_text("Also consider EU market")).ok

    def test_resume_requires_synthesis(self, gateway):
        with pytest.raises(ValidationError):
            ConversationEngine.resume(gateway, ReportModel(original_problem="x"))

    @pytest.mark.asyncio
    async def test_report_is_a_snapshot(self, gateway):
        engine = await engine_at(Phase.DEFINE, gateway)
        snapshot = engine.report
        snapshot.analysis.improved_statement = "tampered"
        assert engine.report.analysis.improved_statement == IMPROVED_STATEMENT


class TestConcurrency:
    """Only one generation call may be in flight."""

    @pytest.mark.asyncio
    async def test_input_rejected_while_loading(self, gateway):
        release = asyncio.Event()
        original = gateway.analyze

        async def slow_analyze(problem, context=""):
            await release.wait()
            return await original(problem, context)

        gateway.analyze = slow_analyze
        engine = ConversationEngine(gateway)

        first = asyncio.create_task(engine.submit_text("Revenue is down"))
        await asyncio.sleep(0)
        assert engine.loading

        second = await engine.submit_text("Something else")
        choice = await engine.submit_choice("confirm")
        assert second.handled is False
        assert choice.handled is False

        release.set()
        assert (await first).ok
        assert not engine.loading
        assert len(gateway.calls_to("analyze")) == 1
        assert [m.text for m in engine.transcript if m.speaker is Speaker.USER] == [
            "Revenue is down"
        ]


class TestSummary:
    """Test engine summaries for logging."""

    @pytest.mark.asyncio
    async def test_to_summary(self, gateway):
        engine = await engine_at(Phase.STRUCTURE, gateway)
        await engine.submit_choice("type_thematic")

        summary = engine.to_summary()
        assert summary["phase"] == "structure"
        assert summary["breakdown_type"] == "thematic"
        assert summary["awaiting_choice"] is True
        assert summary["complete"] is False
        assert summary["messages"] == len(engine.transcript)
