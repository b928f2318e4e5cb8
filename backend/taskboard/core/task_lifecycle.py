# taskboard/core/task_lifecycle.py

from __future__ import annotations

from typing import FrozenSet, Mapping

from taskboard.core.errors import InvalidTransitionError
from taskboard.core.roles import TaskStatus

ASSIGNED = TaskStatus.ASSIGNED.value
VERIFICATION_PENDING = TaskStatus.VERIFICATION_PENDING.value
VERIFIED = TaskStatus.VERIFIED.value
REJECTED = TaskStatus.REJECTED.value

# verified is terminal; rejected may be resubmitted
TRANSITIONS: Mapping[str, FrozenSet[str]] = {
    ASSIGNED: frozenset({VERIFICATION_PENDING}),
    VERIFICATION_PENDING: frozenset({VERIFIED, REJECTED}),
    REJECTED: frozenset({VERIFICATION_PENDING}),
    VERIFIED: frozenset(),
}

# states from which proof may be (re)submitted
SUBMITTABLE_STATES: FrozenSet[str] = frozenset(s for s, nxt in TRANSITIONS.items() if VERIFICATION_PENDING in nxt)

VERIFICATION_OUTCOMES: FrozenSet[str] = TRANSITIONS[VERIFICATION_PENDING]


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def is_terminal(status: str) -> bool:
    return not TRANSITIONS.get(status)


def ensure_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Task cannot move from {current!r} to {target!r}.",
            extra={"current": current, "target": target},
        )
