"""
Pure domain layer.

Value objects and decision functions with NO dependencies on the ORM,
the database, or I/O.  Time enters only through an injected ``Clock``.
"""

from admissions_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from admissions_kernel.domain.workflow import (
    OUTCOME_GUARD_FAILED,
    OUTCOME_NO_TRANSITION,
    OUTCOME_SUCCESS,
    Guard,
    Transition,
    TransitionResult,
    Workflow,
    evaluate_transition,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Guard",
    "Transition",
    "TransitionResult",
    "Workflow",
    "evaluate_transition",
    "OUTCOME_SUCCESS",
    "OUTCOME_NO_TRANSITION",
    "OUTCOME_GUARD_FAILED",
]
