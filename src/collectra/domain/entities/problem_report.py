"""Problem report entity.

A problem report is an issue raised against a collection session
(blocked access, wrong material, missing crew). Reports are opened and
resolved independently of the session's own status.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ProblemPriority(str, Enum):
    """Problem priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ProblemStatus(str, Enum):
    """Problem report status."""

    OPEN = "open"
    RESOLVED = "resolved"


@dataclass
class ProblemReport:
    """Problem report entity.

    Attributes:
        id: Unique identifier.
        session_id: ID of the session the report was raised against (lookup only).
        reported_by: Display name of the reporter.
        reported_date: Timestamp when the problem was reported.
        description: What went wrong.
        priority: Priority level.
        status: open or resolved.
        resolved_by: Display name of the resolver (resolved reports only).
        resolved_date: Timestamp of resolution (resolved reports only).
        resolution: How the problem was resolved (resolved reports only).
    """

    id: str
    session_id: str
    reported_by: str
    reported_date: datetime
    description: str
    priority: ProblemPriority = ProblemPriority.MEDIUM
    status: ProblemStatus = ProblemStatus.OPEN
    resolved_by: str | None = None
    resolved_date: datetime | None = None
    resolution: str | None = None

    def __post_init__(self) -> None:
        """Validate problem report data after initialization."""
        if not self.id:
            raise ValueError("Problem ID is required")
        if not self.session_id:
            raise ValueError("Session ID is required")
        if not self.description:
            raise ValueError("Description is required")

        resolution_fields = (self.resolved_by, self.resolved_date, self.resolution)
        if self.status == ProblemStatus.RESOLVED:
            if any(value is None for value in resolution_fields):
                raise ValueError("Resolved problems require resolved_by, resolved_date and resolution")
        elif any(value is not None for value in resolution_fields):
            raise ValueError("Open problems cannot carry resolution fields")

    @property
    def is_open(self) -> bool:
        """Check if the problem is still open."""
        return self.status == ProblemStatus.OPEN
