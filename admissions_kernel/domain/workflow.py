"""
State machine definitions and the pure transition check.

A ``Workflow`` is a frozen table of ``Transition`` rows.
``evaluate_transition`` looks an action up in that table and returns a
``TransitionResult`` instead of raising; the admission service decides
which exception a refusal becomes.  Nothing here touches the database.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

OUTCOME_SUCCESS = "success"
OUTCOME_NO_TRANSITION = "no_transition"
OUTCOME_GUARD_FAILED = "guard_failed"


@dataclass(frozen=True)
class Guard:
    """Named precondition on a transition.  Evaluated by the caller-supplied checker."""
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """One row of the table.  A self-loop (same from and to state) records
    something about the admission without moving it, as document
    verification does.
    """
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """
    The full lifecycle table.

    Construction fails with ``ValueError`` if a transition names an
    undeclared state or leaves a terminal one, or if the initial state
    is undeclared.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        problems = list(self._definition_problems())
        if problems:
            raise ValueError(f"Workflow {self.name}: " + "; ".join(problems))

    def _definition_problems(self):
        known = set(self.states)
        if self.initial_state not in known:
            yield f"initial state {self.initial_state!r} not in states"
        yield from (
            f"terminal state {s!r} not in states" for s in self.terminal_states if s not in known
        )
        for t in self.transitions:
            if not {t.from_state, t.to_state} <= known:
                yield f"transition {t.action} {t.from_state}->{t.to_state} references unknown state"
            elif t.from_state in self.terminal_states:
                yield f"transition {t.action} leaves terminal state {t.from_state!r}"

    @property
    def actions(self) -> tuple[str, ...]:
        """Distinct action names, in declaration order."""
        return tuple(dict.fromkeys(t.action for t in self.transitions))

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states

    def find_transition(self, from_state: str, action: str) -> Transition | None:
        """The transition for ``action`` out of ``from_state``, if declared."""
        for t in self.transitions:
            if (t.from_state, t.action) == (from_state, action):
                return t
        return None

    def source_states(self, action: str) -> tuple[str, ...]:
        """States from which ``action`` is legal."""
        return tuple(t.from_state for t in self.transitions if t.action == action)


@dataclass(frozen=True)
class TransitionResult:
    """Result of evaluating a workflow transition."""

    success: bool
    action: str
    from_state: str
    new_state: str | None = None
    outcome: str = OUTCOME_SUCCESS
    guard: str | None = None
    reason: str = ""


def evaluate_transition(
    workflow: Workflow,
    current_state: str,
    action: str,
    guard_check: Callable[[Guard], bool] | None = None,
) -> TransitionResult:
    """Decide whether ``action`` may fire from ``current_state``.

    ``guard_check`` is called only when the matching transition declares a
    guard.  A guarded transition with no checker fails closed.
    """
    transition = workflow.find_transition(current_state, action)
    if transition is None:
        legal = workflow.source_states(action)
        return TransitionResult(
            success=False,
            action=action,
            from_state=current_state,
            outcome=OUTCOME_NO_TRANSITION,
            reason=f"{action} is legal only from {', '.join(legal) or 'no state'}",
        )

    if transition.guard is not None:
        if guard_check is None or not guard_check(transition.guard):
            return TransitionResult(
                success=False,
                action=action,
                from_state=current_state,
                outcome=OUTCOME_GUARD_FAILED,
                guard=transition.guard.name,
                reason=transition.guard.description,
            )

    return TransitionResult(
        success=True,
        action=action,
        from_state=current_state,
        new_state=transition.to_state,
        guard=transition.guard.name if transition.guard else None,
    )
