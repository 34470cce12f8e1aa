"""Collection session aggregate.

A collection session is one scheduled pickup of recyclable material from a
supplier. It owns its problem reports and comments, and carries the planned
and actual collection data used to score the session on completion.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from collectra.domain.entities.comment import Comment
from collectra.domain.entities.paper_types import PaperTypeBuckets
from collectra.domain.entities.problem_report import ProblemReport, ProblemStatus


class SessionStatus(str, Enum):
    """Operational status of a collection session."""

    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.CANCELLED)


@dataclass
class CollectionData:
    """Planned and collected quantities (kg).

    Attributes:
        estimated_amount: Planned amount, fixed at creation.
        actual_amount: Collected amount, None until recorded.
        paper_types: Per-material breakdown.
    """

    estimated_amount: float
    actual_amount: float | None = None
    paper_types: PaperTypeBuckets = field(default_factory=PaperTypeBuckets)

    @property
    def paper_type_total(self) -> float:
        return self.paper_types.total

    @property
    def amount_discrepancy(self) -> float | None:
        """Difference between the recorded actual amount and the bucket total.

        None when no actual amount is recorded or the two agree within
        floating-point rounding (0.1 + 0.2 kg matches 0.3 kg).
        """
        if self.actual_amount is None:
            return None
        total = self.paper_types.total
        if math.isclose(self.actual_amount, total, rel_tol=1e-9, abs_tol=1e-9):
            return None
        return self.actual_amount - total


@dataclass(frozen=True)
class Performance:
    """Scores (percent) derived when a session completes."""

    efficiency: int
    quality: int
    punctuality: int


@dataclass
class CollectionSession:
    """Collection session aggregate root.

    Attributes:
        id: Unique identifier, immutable.
        session_number: Human-readable code (e.g. CS-000042), immutable.
        supplier_id: Supplier reference copied at creation.
        supplier_name: Supplier display name copied at creation.
        site_location: Where the collection takes place.
        coordinator_id: Coordinator reference copied at creation.
        coordinator_name: Coordinator display name copied at creation.
        marketer_id: Marketer reference copied at creation.
        marketer_name: Marketer display name copied at creation.
        estimated_start_date: Planned start.
        estimated_end_date: Planned end.
        collection_data: Planned and collected quantities.
        status: Current lifecycle status.
        actual_start_date: Set on the first move into in-progress.
        actual_end_date: Set on the move into completed.
        total_time_spent: Whole hours between actual start and end.
        performance: Scores computed on completion.
        problems: Problem reports in report order.
        comments: Comments in chronological order.
        created_by: ID of the actor that created the session.
        created_at: Creation timestamp.
        updated_at: Last successful write.
        version: Optimistic-lock counter, incremented on every save.
    """

    id: str
    session_number: str
    supplier_id: str
    supplier_name: str
    site_location: str
    coordinator_id: str
    coordinator_name: str
    estimated_start_date: datetime
    estimated_end_date: datetime
    collection_data: CollectionData
    marketer_id: str | None = None
    marketer_name: str | None = None
    status: SessionStatus = SessionStatus.PLANNED
    actual_start_date: datetime | None = None
    actual_end_date: datetime | None = None
    total_time_spent: int | None = None
    performance: Performance | None = None
    problems: list[ProblemReport] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    created_by: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = 1

    def __post_init__(self) -> None:
        """Validate session data after initialization."""
        if not self.id:
            raise ValueError("Session ID is required")
        if not self.session_number:
            raise ValueError("Session number is required")
        if self.estimated_start_date > self.estimated_end_date:
            raise ValueError("Estimated start date must not be after estimated end date")

    @property
    def is_terminal(self) -> bool:
        """Check if the session can no longer change status."""
        return self.status.is_terminal

    @property
    def open_problems(self) -> list[ProblemReport]:
        return [p for p in self.problems if p.status == ProblemStatus.OPEN]

    @property
    def resolved_problems(self) -> list[ProblemReport]:
        return [p for p in self.problems if p.status == ProblemStatus.RESOLVED]

    def find_problem(self, problem_id: str) -> ProblemReport | None:
        """Return the problem report with the given ID, if any."""
        for problem in self.problems:
            if problem.id == problem_id:
                return problem
        return None
