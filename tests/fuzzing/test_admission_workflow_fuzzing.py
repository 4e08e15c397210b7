"""
Hypothesis fuzzing for the admission workflow.

Fuzzes:
- Any (status, action) pair against the transition table (pure)
- Random operation sequences against the engine and a real database:
  every illegal operation raises and leaves the stored admission
  untouched, every legal one lands on the status the table predicts
- Statistics always add up after arbitrary histories
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from admission_helpers import default_inquiry
from admissions_kernel.domain.workflow import evaluate_transition
from admissions_kernel.exceptions import InvalidTransitionError
from admissions_modules.admission.models import (
    TERMINAL_STATUSES,
    AdmissionStatus,
    ApplicationDetails,
    EnrollmentRequest,
    InterviewFeedback,
    TestScore,
)
from admissions_modules.admission.workflows import ADMISSION_WORKFLOW

# Every engine operation, keyed by workflow action, with a valid payload.
OPERATIONS = {
    "convert_to_application": lambda svc, a_id: svc.convert_to_application(
        a_id, ApplicationDetails(gender="male")
    ),
    "schedule_test": lambda svc, a_id: svc.schedule_test(a_id, date(2024, 2, 15)),
    "record_test_score": lambda svc, a_id: svc.record_test_score(
        a_id, TestScore(score=Decimal("70"), max_score=Decimal("100"))
    ),
    "schedule_interview": lambda svc, a_id: svc.schedule_interview(a_id, date(2024, 2, 20)),
    "record_interview": lambda svc, a_id: svc.record_interview(
        a_id, InterviewFeedback(feedback="Confident")
    ),
    "admit": lambda svc, a_id: svc.admit(a_id),
    "enroll": lambda svc, a_id: svc.enroll(a_id, EnrollmentRequest()).admission,
    "reject": lambda svc, a_id: svc.reject(a_id, "Seats full"),
    "withdraw": lambda svc, a_id: svc.withdraw(a_id, "Family relocated"),
    "verify_documents": lambda svc, a_id: svc.verify_documents(a_id),
}

statuses = st.sampled_from(list(AdmissionStatus))
actions = st.sampled_from(sorted(OPERATIONS))


# ---------------------------------------------------------------------------
# Pure: transition table
# ---------------------------------------------------------------------------


class TestTransitionTableProperties:

    def test_operations_cover_every_action(self):
        assert set(OPERATIONS) == set(ADMISSION_WORKFLOW.actions)

    @given(status=statuses, action=actions)
    @settings(max_examples=300)
    def test_success_iff_declared(self, status, action):
        result = evaluate_transition(ADMISSION_WORKFLOW, status.value, action)
        declared = ADMISSION_WORKFLOW.find_transition(status.value, action)
        assert result.success == (declared is not None)
        if result.success:
            assert result.new_state == declared.to_state
        else:
            assert result.new_state is None
            assert result.reason

    @given(status=st.sampled_from(sorted(TERMINAL_STATUSES, key=lambda s: s.value)), action=actions)
    def test_terminal_is_absorbing(self, status, action):
        assert not evaluate_transition(ADMISSION_WORKFLOW, status.value, action).success

    @given(status=statuses, action=actions)
    def test_deterministic(self, status, action):
        first = evaluate_transition(ADMISSION_WORKFLOW, status.value, action)
        second = evaluate_transition(ADMISSION_WORKFLOW, status.value, action)
        assert first == second


# ---------------------------------------------------------------------------
# Engine: random operation histories
# ---------------------------------------------------------------------------


@pytest.mark.slow
class TestEngineHistories:

    @given(history=st.lists(actions, max_size=12))
    @settings(
        max_examples=40,
        deadline=None,
        suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    )
    def test_illegal_operations_change_nothing(self, admission_service, history):
        current = admission_service.create_inquiry(default_inquiry())

        for action in history:
            expected = evaluate_transition(ADMISSION_WORKFLOW, current.status.value, action)
            if expected.success:
                after = OPERATIONS[action](admission_service, current.id)
                assert after.status is AdmissionStatus(expected.new_state)
                assert after.version == current.version + 1
                current = after
            else:
                with pytest.raises(InvalidTransitionError):
                    OPERATIONS[action](admission_service, current.id)
                assert admission_service.get_admission(current.id) == current

            current.check_invariants()

    @given(histories=st.lists(st.lists(actions, max_size=8), min_size=1, max_size=5))
    @settings(
        max_examples=20,
        deadline=None,
        suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    )
    def test_statistics_add_up(self, admission_service, histories):
        for history in histories:
            current = admission_service.create_inquiry(default_inquiry())
            for action in history:
                if evaluate_transition(ADMISSION_WORKFLOW, current.status.value, action).success:
                    current = OPERATIONS[action](admission_service, current.id)

        stats = admission_service.get_statistics()
        assert set(stats.by_status) == set(AdmissionStatus)
        assert sum(stats.by_status.values()) == stats.total
        assert sum(stats.by_class.values()) == stats.total
        assert stats.total == admission_service.find_all().total
