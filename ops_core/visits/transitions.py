# backend/ops_core/visits/transitions.py
from __future__ import annotations

from django.core.exceptions import ValidationError

from ops_core.visits.models import VisitStatus

# from -> allowed targets. Anything missing from a set is rejected.
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    VisitStatus.PLANNED: frozenset({VisitStatus.IN_PROGRESS, VisitStatus.CANCELLED, VisitStatus.MISSED}),
    VisitStatus.IN_PROGRESS: frozenset({VisitStatus.COMPLETED, VisitStatus.CANCELLED}),
    VisitStatus.COMPLETED: frozenset(),
    VisitStatus.CANCELLED: frozenset(),
    VisitStatus.MISSED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if not targets)


class InvalidStatusTransitionError(ValidationError):
    """
    Raised when a visit is asked to move along an edge that is not in
    ALLOWED_TRANSITIONS. Nothing has been written when this is raised.
    """

    def __init__(self, from_status: str, to_status: str, message: str | None = None):
        self.from_status = str(from_status)
        self.to_status = str(to_status)
        super().__init__(
            message or f"Cannot move visit from '{self.from_status}' to '{self.to_status}'.",
            code="invalid_status_transition",
        )


def can_transition(from_status: str, to_status: str) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, frozenset())


def assert_transition(from_status: str, to_status: str) -> None:
    if not can_transition(from_status, to_status):
        raise InvalidStatusTransitionError(from_status, to_status)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES
