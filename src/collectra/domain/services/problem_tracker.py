"""Problem tracker for collection sessions.

Reports are appended in report order and resolved independently. A
resolved report is never reopened. Reporting and resolving are allowed in
every session status, including after the session closed.
"""

from datetime import datetime

from collectra.domain.entities import (
    Actor,
    CollectionSession,
    ProblemPriority,
    ProblemReport,
    ProblemStatus,
)
from collectra.domain.errors import InvalidStateError, NotFoundError, ValidationError


class ProblemTracker:
    """Opens and resolves problem reports on a session aggregate."""

    @staticmethod
    def parse_priority(value: str | ProblemPriority) -> ProblemPriority:
        try:
            return ProblemPriority(value)
        except ValueError:
            allowed = ", ".join(p.value for p in ProblemPriority)
            raise ValidationError.single(
                field="priority",
                message=f"Unknown priority '{value}'. Must be one of: {allowed}",
                code="unknown_priority",
            ) from None

    def report(
        self,
        session: CollectionSession,
        problem_id: str,
        description: str,
        priority: str | ProblemPriority,
        actor: Actor,
        now: datetime,
    ) -> ProblemReport:
        """Append an open problem report.

        Raises:
            ValidationError: If the description is blank or the priority unknown.
        """
        if not description or not description.strip():
            raise ValidationError.single(
                field="description",
                message="Description is required",
                code="required",
            )

        problem = ProblemReport(
            id=problem_id,
            session_id=session.id,
            reported_by=actor.name,
            reported_date=now,
            description=description.strip(),
            priority=self.parse_priority(priority),
        )
        session.problems.append(problem)
        return problem

    def resolve(
        self,
        session: CollectionSession,
        problem_id: str,
        resolution: str,
        actor: Actor,
        now: datetime,
    ) -> ProblemReport:
        """Resolve an open problem report.

        Raises:
            NotFoundError: If the session has no report with this ID.
            InvalidStateError: If the report is already resolved.
            ValidationError: If the resolution text is blank.
        """
        problem = session.find_problem(problem_id)
        if problem is None:
            raise NotFoundError("Problem report", problem_id)
        if not problem.is_open:
            raise InvalidStateError("Problem report is already resolved")
        if not resolution or not resolution.strip():
            raise ValidationError.single(
                field="resolution",
                message="Resolution is required",
                code="required",
            )

        problem.resolved_by = actor.name
        problem.resolved_date = now
        problem.resolution = resolution.strip()
        problem.status = ProblemStatus.RESOLVED
        return problem
