"""Session lifecycle state machine.

    planned ──> in-progress ──> completed
       │             │
       └──────┬──────┘
              v
          cancelled

completed and cancelled are terminal. Entering in-progress stamps the
actual start; entering completed stamps the actual end, the hours spent and
the performance scores.
"""

from datetime import datetime

from collectra.domain.entities import CollectionSession, SessionStatus
from collectra.domain.errors import InvalidTransitionError, ValidationError
from collectra.domain.services.performance_calculator import PerformanceCalculator, round_half_up

ALLOWED_TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.PLANNED: frozenset({SessionStatus.IN_PROGRESS, SessionStatus.CANCELLED}),
    SessionStatus.IN_PROGRESS: frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED}),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.CANCELLED: frozenset(),
}

SECONDS_PER_HOUR = 3600


def hours_between(start: datetime, end: datetime) -> int:
    """Whole hours from start to end, rounded half-up."""
    return round_half_up((end - start).total_seconds() / SECONDS_PER_HOUR)


class SessionLifecycle:
    """Validates and applies status transitions on a session aggregate."""

    def __init__(self, calculator: PerformanceCalculator | None = None) -> None:
        self.calculator = calculator or PerformanceCalculator()

    @staticmethod
    def parse_status(value: str | SessionStatus) -> SessionStatus:
        try:
            return SessionStatus(value)
        except ValueError:
            allowed = ", ".join(s.value for s in SessionStatus)
            raise ValidationError.single(
                field="target_status",
                message=f"Unknown status '{value}'. Must be one of: {allowed}",
                code="unknown_status",
            ) from None

    @staticmethod
    def can_transition(current: SessionStatus, target: SessionStatus) -> tuple[bool, str]:
        """Check if a status change is an edge of the graph.

        Returns:
            (allowed, reason)
        """
        if current == target:
            return False, f"Session is already '{current.value}'"
        if current.is_terminal:
            return False, f"'{current.value}' is a terminal status"
        if target not in ALLOWED_TRANSITIONS[current]:
            return False, f"'{current.value}' cannot move to '{target.value}'"
        return True, "ok"

    def apply(self, session: CollectionSession, target: str | SessionStatus, now: datetime) -> None:
        """Move the session to target and apply the entry side effects.

        The session is left untouched when the transition is rejected.

        Raises:
            ValidationError: If target is not a known status.
            InvalidTransitionError: If the transition is not allowed.
        """
        target_status = self.parse_status(target)
        allowed, _ = self.can_transition(session.status, target_status)
        if not allowed:
            raise InvalidTransitionError(session.status.value, target_status.value)

        session.status = target_status

        if target_status == SessionStatus.IN_PROGRESS:
            if session.actual_start_date is None:
                session.actual_start_date = now

        elif target_status == SessionStatus.COMPLETED:
            if session.actual_end_date is None:
                session.actual_end_date = now
            # in-progress is the only way into completed, so the start is set
            start = session.actual_start_date or session.actual_end_date
            session.total_time_spent = hours_between(start, session.actual_end_date)
            session.performance = self.calculator.calculate(session)
