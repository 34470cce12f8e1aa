"""Session reports and status summaries.

Read-only views over collection sessions: the per-session report shown
after a collection and the overview counters across all sessions.
"""

from dataclasses import dataclass, field
from datetime import datetime

from collectra.domain.entities import CollectionSession, Performance, SessionStatus


@dataclass(frozen=True)
class SessionReport:
    """Summary of one session's execution."""

    session_id: str
    session_number: str
    status: SessionStatus
    actual_start_date: datetime | None
    actual_end_date: datetime | None
    total_time_spent: int | None
    total_problems: int
    open_problems: int
    resolved_problems: int
    total_comments: int
    estimated_amount: float
    actual_amount: float | None
    paper_type_total: float
    amount_discrepancy: float | None
    performance: Performance | None


@dataclass(frozen=True)
class StatusSummary:
    """Counters across all sessions."""

    total_sessions: int
    by_status: dict[SessionStatus, int] = field(default_factory=dict)
    open_problems: int = 0
    total_collected: float = 0.0
    average_efficiency: float | None = None


def build_session_report(session: CollectionSession) -> SessionReport:
    """Build the execution report for one session."""
    data = session.collection_data
    return SessionReport(
        session_id=session.id,
        session_number=session.session_number,
        status=session.status,
        actual_start_date=session.actual_start_date,
        actual_end_date=session.actual_end_date,
        total_time_spent=session.total_time_spent,
        total_problems=len(session.problems),
        open_problems=len(session.open_problems),
        resolved_problems=len(session.resolved_problems),
        total_comments=len(session.comments),
        estimated_amount=data.estimated_amount,
        actual_amount=data.actual_amount,
        paper_type_total=data.paper_type_total,
        amount_discrepancy=data.amount_discrepancy,
        performance=session.performance,
    )


def summarize_sessions(sessions: list[CollectionSession]) -> StatusSummary:
    """Aggregate status counts and completed-session totals.

    Collected amount and mean efficiency only consider completed sessions.
    """
    by_status = {status: 0 for status in SessionStatus}
    open_problems = 0
    total_collected = 0.0
    efficiencies: list[int] = []

    for session in sessions:
        by_status[session.status] += 1
        open_problems += len(session.open_problems)
        if session.status == SessionStatus.COMPLETED:
            total_collected += session.collection_data.actual_amount or 0.0
            if session.performance is not None:
                efficiencies.append(session.performance.efficiency)

    average_efficiency = round(sum(efficiencies) / len(efficiencies), 1) if efficiencies else None

    return StatusSummary(
        total_sessions=len(sessions),
        by_status=by_status,
        open_problems=open_problems,
        total_collected=total_collected,
        average_efficiency=average_efficiency,
    )
