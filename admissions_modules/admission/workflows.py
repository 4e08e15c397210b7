"""
Admission Workflows (``admissions_modules.admission.workflows``).

Responsibility
--------------
Declares the state-machine definition for the admission lifecycle.
Guards express preconditions for transitions; the service supplies the
checker that evaluates them against the loaded snapshot.

Architecture position
---------------------
**Modules layer** -- declarative workflow definitions.  Imports canonical
Guard, Transition, Workflow from ``admissions_kernel.domain.workflow``.
Consumed by ``AdmissionService`` through ``evaluate_transition``.

Invariants enforced
-------------------
* All ``Workflow``, ``Transition``, and ``Guard`` instances are
  ``frozen=True`` -- immutable after module load.
* ``ADMISSION_WORKFLOW.states`` matches ``AdmissionStatus`` exactly.
* No transition leaves ``enrolled``, ``rejected`` or ``withdrawn``.

Failure modes
-------------
* ``ValueError`` from ``Workflow.__post_init__`` when ``admit_from``
  names an unknown or terminal state.

Audit relevance
---------------
Workflow definitions logged at module-load time with state counts and
transition counts for configuration audit.
"""

from admissions_kernel.domain.workflow import Guard, Transition, Workflow
from admissions_kernel.logging_config import get_logger
from admissions_modules.admission.models import TERMINAL_STATUSES, AdmissionStatus

logger = get_logger("modules.admission.workflows")

S = AdmissionStatus


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

DOCUMENTS_VERIFIED = Guard(
    name="documents_verified",
    description="Applicant documents verified before admission",
)

logger.info(
    "admission_workflow_guards_defined",
    extra={"guards": [DOCUMENTS_VERIFIED.name]},
)


# -----------------------------------------------------------------------------
# Actions
# -----------------------------------------------------------------------------

ACTION_CONVERT_TO_APPLICATION = "convert_to_application"
ACTION_SCHEDULE_TEST = "schedule_test"
ACTION_RECORD_TEST_SCORE = "record_test_score"
ACTION_SCHEDULE_INTERVIEW = "schedule_interview"
ACTION_RECORD_INTERVIEW = "record_interview"
ACTION_ADMIT = "admit"
ACTION_ENROLL = "enroll"
ACTION_REJECT = "reject"
ACTION_WITHDRAW = "withdraw"
ACTION_VERIFY_DOCUMENTS = "verify_documents"

DEFAULT_ADMIT_FROM: tuple[AdmissionStatus, ...] = (S.APPLIED, S.TESTED, S.INTERVIEWED)

_NON_TERMINAL = tuple(s for s in AdmissionStatus if s not in TERMINAL_STATUSES)


def build_admission_workflow(
    admit_from: tuple[AdmissionStatus, ...] = DEFAULT_ADMIT_FROM,
    require_documents_verified: bool = False,
) -> Workflow:
    """Build the admission workflow for a given admission policy.

    ``admit_from`` lists the states ``admit`` is legal from.  With
    ``require_documents_verified`` every ``admit`` transition carries the
    ``DOCUMENTS_VERIFIED`` guard.
    """
    admit_guard = DOCUMENTS_VERIFIED if require_documents_verified else None

    transitions: list[Transition] = [
        Transition(S.INQUIRY.value, S.APPLIED.value, action=ACTION_CONVERT_TO_APPLICATION),
        Transition(S.APPLIED.value, S.TEST_SCHEDULED.value, action=ACTION_SCHEDULE_TEST),
        Transition(S.TEST_SCHEDULED.value, S.TESTED.value, action=ACTION_RECORD_TEST_SCORE),
        Transition(S.APPLIED.value, S.INTERVIEW_SCHEDULED.value, action=ACTION_SCHEDULE_INTERVIEW),
        Transition(S.TESTED.value, S.INTERVIEW_SCHEDULED.value, action=ACTION_SCHEDULE_INTERVIEW),
        Transition(S.INTERVIEW_SCHEDULED.value, S.INTERVIEWED.value, action=ACTION_RECORD_INTERVIEW),
    ]
    transitions.extend(
        Transition(state.value, S.ADMITTED.value, action=ACTION_ADMIT, guard=admit_guard)
        for state in admit_from
    )
    transitions.append(
        Transition(S.ADMITTED.value, S.ENROLLED.value, action=ACTION_ENROLL),
    )
    for state in _NON_TERMINAL:
        transitions.append(Transition(state.value, S.REJECTED.value, action=ACTION_REJECT))
        transitions.append(Transition(state.value, S.WITHDRAWN.value, action=ACTION_WITHDRAW))
        transitions.append(Transition(state.value, state.value, action=ACTION_VERIFY_DOCUMENTS))

    return Workflow(
        name="admission",
        description="Admission lifecycle from inquiry to enrollment",
        initial_state=S.INQUIRY.value,
        states=tuple(s.value for s in AdmissionStatus),
        transitions=tuple(transitions),
        terminal_states=tuple(s.value for s in AdmissionStatus if s in TERMINAL_STATUSES),
    )


ADMISSION_WORKFLOW = build_admission_workflow()

logger.info(
    "admission_workflow_registered",
    extra={
        "workflow": ADMISSION_WORKFLOW.name,
        "state_count": len(ADMISSION_WORKFLOW.states),
        "transition_count": len(ADMISSION_WORKFLOW.transitions),
    },
)
