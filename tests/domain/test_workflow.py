"""
Tests for the workflow primitives and the admission workflow definition.

Pure tests -- no database.
"""

from datetime import UTC, datetime, timedelta

import pytest

from admissions_kernel.domain.clock import DeterministicClock
from admissions_kernel.domain.workflow import (
    OUTCOME_GUARD_FAILED,
    OUTCOME_NO_TRANSITION,
    OUTCOME_SUCCESS,
    Guard,
    Transition,
    Workflow,
    evaluate_transition,
)
from admissions_modules.admission.models import TERMINAL_STATUSES, AdmissionStatus
from admissions_modules.admission.workflows import (
    ACTION_ADMIT,
    ACTION_ENROLL,
    ACTION_REJECT,
    ACTION_SCHEDULE_INTERVIEW,
    ACTION_VERIFY_DOCUMENTS,
    ACTION_WITHDRAW,
    ADMISSION_WORKFLOW,
    DOCUMENTS_VERIFIED,
    build_admission_workflow,
)

S = AdmissionStatus


# =============================================================================
# Workflow primitives
# =============================================================================


class TestWorkflowDefinition:

    def test_initial_state_must_be_declared(self):
        with pytest.raises(ValueError, match="initial state"):
            Workflow(
                name="w",
                description="",
                initial_state="missing",
                states=("a",),
                transitions=(),
            )

    def test_transition_states_must_be_declared(self):
        with pytest.raises(ValueError, match="unknown state"):
            Workflow(
                name="w",
                description="",
                initial_state="a",
                states=("a",),
                transitions=(Transition("a", "b", action="go"),),
            )

    def test_no_transition_out_of_terminal_state(self):
        with pytest.raises(ValueError, match="terminal"):
            Workflow(
                name="w",
                description="",
                initial_state="a",
                states=("a", "b"),
                transitions=(Transition("b", "a", action="reopen"),),
                terminal_states=("b",),
            )

    def test_actions_in_declaration_order(self):
        wf = Workflow(
            name="w",
            description="",
            initial_state="a",
            states=("a", "b"),
            transitions=(
                Transition("a", "b", action="go"),
                Transition("b", "a", action="back"),
                Transition("a", "a", action="go"),
            ),
        )
        assert wf.actions == ("go", "back")


class TestEvaluateTransition:

    WF = Workflow(
        name="w",
        description="",
        initial_state="draft",
        states=("draft", "live", "closed"),
        transitions=(
            Transition("draft", "live", action="publish"),
            Transition("live", "closed", action="close", guard=Guard("ok", "must be ok")),
        ),
        terminal_states=("closed",),
    )

    def test_success(self):
        result = evaluate_transition(self.WF, "draft", "publish")
        assert result.success
        assert result.outcome == OUTCOME_SUCCESS
        assert result.new_state == "live"
        assert result.from_state == "draft"

    def test_no_transition(self):
        result = evaluate_transition(self.WF, "draft", "close")
        assert not result.success
        assert result.outcome == OUTCOME_NO_TRANSITION
        assert result.new_state is None
        assert "live" in result.reason

    def test_unknown_action(self):
        result = evaluate_transition(self.WF, "draft", "explode")
        assert result.outcome == OUTCOME_NO_TRANSITION

    def test_guard_without_checker_fails_closed(self):
        result = evaluate_transition(self.WF, "live", "close")
        assert result.outcome == OUTCOME_GUARD_FAILED
        assert result.guard == "ok"

    def test_guard_checker_false(self):
        result = evaluate_transition(self.WF, "live", "close", guard_check=lambda g: False)
        assert result.outcome == OUTCOME_GUARD_FAILED

    def test_guard_checker_true(self):
        result = evaluate_transition(self.WF, "live", "close", guard_check=lambda g: True)
        assert result.success
        assert result.new_state == "closed"
        assert result.guard == "ok"

    def test_checker_not_called_for_unguarded(self):
        def explode(guard):
            raise AssertionError("should not be called")

        assert evaluate_transition(self.WF, "draft", "publish", guard_check=explode).success


# =============================================================================
# Admission workflow table
# =============================================================================


EXPECTED_FORWARD = {
    ("convert_to_application", S.INQUIRY): S.APPLIED,
    ("schedule_test", S.APPLIED): S.TEST_SCHEDULED,
    ("record_test_score", S.TEST_SCHEDULED): S.TESTED,
    ("schedule_interview", S.APPLIED): S.INTERVIEW_SCHEDULED,
    ("schedule_interview", S.TESTED): S.INTERVIEW_SCHEDULED,
    ("record_interview", S.INTERVIEW_SCHEDULED): S.INTERVIEWED,
    ("admit", S.APPLIED): S.ADMITTED,
    ("admit", S.TESTED): S.ADMITTED,
    ("admit", S.INTERVIEWED): S.ADMITTED,
    ("enroll", S.ADMITTED): S.ENROLLED,
}

NON_TERMINAL = [s for s in AdmissionStatus if s not in TERMINAL_STATUSES]


class TestAdmissionWorkflow:

    def test_states_match_enum(self):
        assert set(ADMISSION_WORKFLOW.states) == {s.value for s in AdmissionStatus}
        assert ADMISSION_WORKFLOW.initial_state == "inquiry"
        assert set(ADMISSION_WORKFLOW.terminal_states) == {"enrolled", "rejected", "withdrawn"}

    @pytest.mark.parametrize("key,expected", list(EXPECTED_FORWARD.items()))
    def test_forward_transitions(self, key, expected):
        action, source = key
        result = evaluate_transition(ADMISSION_WORKFLOW, source.value, action)
        assert result.success
        assert result.new_state == expected.value

    def test_forward_table_is_exhaustive(self):
        forward_actions = {a for a, _ in EXPECTED_FORWARD}
        for transition in ADMISSION_WORKFLOW.transitions:
            if transition.action not in forward_actions:
                continue
            key = (transition.action, AdmissionStatus(transition.from_state))
            assert key in EXPECTED_FORWARD

    def test_schedule_interview_sources(self):
        assert set(ADMISSION_WORKFLOW.source_states(ACTION_SCHEDULE_INTERVIEW)) == {
            "applied",
            "tested",
        }

    def test_enroll_only_from_admitted(self):
        assert ADMISSION_WORKFLOW.source_states(ACTION_ENROLL) == ("admitted",)

    @pytest.mark.parametrize("status", NON_TERMINAL)
    def test_reject_and_withdraw_from_every_non_terminal(self, status):
        assert evaluate_transition(ADMISSION_WORKFLOW, status.value, ACTION_REJECT).new_state == "rejected"
        assert evaluate_transition(ADMISSION_WORKFLOW, status.value, ACTION_WITHDRAW).new_state == "withdrawn"

    @pytest.mark.parametrize("status", NON_TERMINAL)
    def test_verify_documents_keeps_status(self, status):
        result = evaluate_transition(ADMISSION_WORKFLOW, status.value, ACTION_VERIFY_DOCUMENTS)
        assert result.success
        assert result.new_state == status.value

    @pytest.mark.parametrize("status", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    def test_terminal_states_have_no_transitions(self, status):
        for action in ADMISSION_WORKFLOW.actions:
            assert not evaluate_transition(ADMISSION_WORKFLOW, status.value, action).success

    def test_admit_from_is_configurable(self):
        wf = build_admission_workflow(admit_from=(S.INTERVIEWED,))
        assert wf.source_states(ACTION_ADMIT) == ("interviewed",)
        assert not evaluate_transition(wf, "applied", ACTION_ADMIT).success

    def test_admit_from_terminal_state_rejected(self):
        with pytest.raises(ValueError):
            build_admission_workflow(admit_from=(S.ENROLLED,))

    def test_documents_guard_on_admit(self):
        wf = build_admission_workflow(require_documents_verified=True)
        result = evaluate_transition(wf, "applied", ACTION_ADMIT, guard_check=lambda g: False)
        assert result.outcome == OUTCOME_GUARD_FAILED
        assert result.guard == DOCUMENTS_VERIFIED.name

        result = evaluate_transition(
            wf, "applied", ACTION_ADMIT,
            guard_check=lambda g: g.name == DOCUMENTS_VERIFIED.name,
        )
        assert result.success


# =============================================================================
# Clock
# =============================================================================


class TestDeterministicClock:

    def test_fixed_until_advanced(self):
        clock = DeterministicClock()
        assert clock.now() == clock.now()
        first = clock.now()
        clock.advance(60)
        assert clock.now() == first + timedelta(seconds=60)

    def test_tick_moves_forward(self):
        clock = DeterministicClock()
        before = clock.now()
        assert clock.tick() > before

    def test_set_time(self):
        clock = DeterministicClock()
        target = datetime(2025, 3, 1, tzinfo=UTC)
        clock.set_time(target)
        assert clock.now() == target
        assert clock.today() == target.date()
