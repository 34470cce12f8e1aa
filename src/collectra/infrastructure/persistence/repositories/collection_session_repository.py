"""Collection session repository for database operations.

Implements the SessionRepository contract on SQLAlchemy. The repository
flushes but never commits; the caller owns the transaction.
"""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from collectra.domain.entities import (
    CollectionData,
    CollectionSession,
    Comment,
    PaperType,
    PaperTypeBuckets,
    Performance,
    ProblemPriority,
    ProblemReport,
    ProblemStatus,
    SessionStatus,
)
from collectra.domain.errors import ConflictError, NotFoundError
from collectra.domain.repositories import SessionRepository
from collectra.infrastructure.persistence.models import (
    CollectionSessionModel,
    CommentModel,
    ProblemReportModel,
)


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize a datetime read from or written to the database to aware UTC.

    SQLite drops tzinfo on DateTime(timezone=True) columns; naive values are
    stored as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def session_values(session: CollectionSession) -> dict[str, Any]:
    """Column values for a session row, excluding version."""
    data = session.collection_data
    performance = session.performance
    values: dict[str, Any] = {
        "id": session.id,
        "session_number": session.session_number,
        "supplier_id": session.supplier_id,
        "supplier_name": session.supplier_name,
        "site_location": session.site_location,
        "coordinator_id": session.coordinator_id,
        "coordinator_name": session.coordinator_name,
        "marketer_id": session.marketer_id,
        "marketer_name": session.marketer_name,
        "status": session.status.value,
        "estimated_start_date": as_utc(session.estimated_start_date),
        "estimated_end_date": as_utc(session.estimated_end_date),
        "actual_start_date": as_utc(session.actual_start_date),
        "actual_end_date": as_utc(session.actual_end_date),
        "total_time_spent": session.total_time_spent,
        "estimated_amount": data.estimated_amount,
        "actual_amount": data.actual_amount,
        "efficiency": performance.efficiency if performance else None,
        "quality": performance.quality if performance else None,
        "punctuality": performance.punctuality if performance else None,
        "created_by": session.created_by,
        "created_at": as_utc(session.created_at),
        "updated_at": as_utc(session.updated_at),
    }
    values.update(data.paper_types.as_dict())
    return values


def problem_values(problem: ProblemReport, position: int) -> dict[str, Any]:
    return {
        "id": problem.id,
        "session_id": problem.session_id,
        "position": position,
        "reported_by": problem.reported_by,
        "reported_date": as_utc(problem.reported_date),
        "description": problem.description,
        "priority": problem.priority.value,
        "status": problem.status.value,
        "resolved_by": problem.resolved_by,
        "resolved_date": as_utc(problem.resolved_date),
        "resolution": problem.resolution,
    }


def comment_values(comment: Comment, position: int) -> dict[str, Any]:
    return {
        "id": comment.id,
        "session_id": comment.session_id,
        "position": position,
        "author_id": comment.author_id,
        "author_name": comment.author_name,
        "comment": comment.comment,
        "timestamp": as_utc(comment.timestamp),
        "type": comment.type,
    }


def to_problem(model: ProblemReportModel) -> ProblemReport:
    return ProblemReport(
        id=model.id,
        session_id=model.session_id,
        reported_by=model.reported_by,
        reported_date=as_utc(model.reported_date),
        description=model.description,
        priority=ProblemPriority(model.priority),
        status=ProblemStatus(model.status),
        resolved_by=model.resolved_by,
        resolved_date=as_utc(model.resolved_date),
        resolution=model.resolution,
    )


def to_comment(model: CommentModel) -> Comment:
    return Comment(
        id=model.id,
        session_id=model.session_id,
        author_id=model.author_id,
        author_name=model.author_name,
        comment=model.comment,
        timestamp=as_utc(model.timestamp),
        type=model.type,
    )


def to_entity(
    model: CollectionSessionModel,
    problems: list[ProblemReportModel],
    comments: list[CommentModel],
) -> CollectionSession:
    """Convert a session row and its child rows to the domain aggregate."""
    performance = None
    if model.efficiency is not None:
        performance = Performance(
            efficiency=model.efficiency,
            quality=model.quality or 0,
            punctuality=model.punctuality or 0,
        )

    buckets = PaperTypeBuckets(**{p.value: getattr(model, p.value) or 0.0 for p in PaperType})

    return CollectionSession(
        id=model.id,
        session_number=model.session_number,
        supplier_id=model.supplier_id,
        supplier_name=model.supplier_name,
        site_location=model.site_location,
        coordinator_id=model.coordinator_id,
        coordinator_name=model.coordinator_name,
        marketer_id=model.marketer_id,
        marketer_name=model.marketer_name,
        estimated_start_date=as_utc(model.estimated_start_date),
        estimated_end_date=as_utc(model.estimated_end_date),
        collection_data=CollectionData(
            estimated_amount=model.estimated_amount,
            actual_amount=model.actual_amount,
            paper_types=buckets,
        ),
        status=SessionStatus(model.status),
        actual_start_date=as_utc(model.actual_start_date),
        actual_end_date=as_utc(model.actual_end_date),
        total_time_spent=model.total_time_spent,
        performance=performance,
        problems=[to_problem(p) for p in problems],
        comments=[to_comment(c) for c in comments],
        created_by=model.created_by,
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
        version=model.version,
    )


class CollectionSessionRepository(SessionRepository):
    """Repository for collection session database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def load(self, session_id: str) -> CollectionSession:
        result = await self.session.execute(
            select(CollectionSessionModel)
            .where(CollectionSessionModel.id == session_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        if model is None:
            raise NotFoundError("Collection session", session_id)

        problems = await self._problems_by_session([session_id])
        comments = await self._comments_by_session([session_id])
        return to_entity(model, problems[session_id], comments[session_id])

    async def add(self, session: CollectionSession) -> CollectionSession:
        result = await self.session.execute(
            select(CollectionSessionModel.id).where(
                (CollectionSessionModel.id == session.id)
                | (CollectionSessionModel.session_number == session.session_number)
            )
        )
        if result.first() is not None:
            raise ConflictError(session.id, message="Session ID or session number already exists")

        try:
            await self.session.execute(
                insert(CollectionSessionModel).values(**session_values(session), version=1)
            )
            await self._insert_children(session)
            await self.session.flush()
        except IntegrityError as e:
            raise ConflictError(session.id, message="Session ID or session number already exists") from e

        session.version = 1
        return session

    async def save(self, session: CollectionSession, expected_version: int) -> CollectionSession:
        values = session_values(session)
        values.pop("id")
        result = await self.session.execute(
            update(CollectionSessionModel)
            .where(
                CollectionSessionModel.id == session.id,
                CollectionSessionModel.version == expected_version,
            )
            .values(**values, version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            current = await self.session.scalar(
                select(CollectionSessionModel.version).where(CollectionSessionModel.id == session.id)
            )
            if current is None:
                raise NotFoundError("Collection session", session.id)
            raise ConflictError(session.id, expected_version, current)

        # Child rows are rewritten under the version check above
        await self._delete_children(session.id)
        await self._insert_children(session)
        await self.session.flush()

        session.version = expected_version + 1
        return session

    async def delete(self, session_id: str) -> None:
        exists = await self.session.scalar(
            select(CollectionSessionModel.id).where(CollectionSessionModel.id == session_id)
        )
        if exists is None:
            raise NotFoundError("Collection session", session_id)

        # SQLite enforces ON DELETE CASCADE only with foreign_keys=ON
        await self._delete_children(session_id)
        await self.session.execute(
            delete(CollectionSessionModel).where(CollectionSessionModel.id == session_id)
        )
        await self.session.flush()

    async def list_all(self) -> list[CollectionSession]:
        result = await self.session.execute(
            select(CollectionSessionModel)
            .order_by(CollectionSessionModel.created_at.asc(), CollectionSessionModel.session_number.asc())
            .execution_options(populate_existing=True)
        )
        models = list(result.scalars().all())
        if not models:
            return []

        ids = [m.id for m in models]
        problems = await self._problems_by_session(ids)
        comments = await self._comments_by_session(ids)
        return [to_entity(m, problems[m.id], comments[m.id]) for m in models]

    async def list_session_numbers(self) -> list[str]:
        result = await self.session.execute(select(CollectionSessionModel.session_number))
        return list(result.scalars().all())

    async def _problems_by_session(self, session_ids: list[str]) -> dict[str, list[ProblemReportModel]]:
        result = await self.session.execute(
            select(ProblemReportModel)
            .where(ProblemReportModel.session_id.in_(session_ids))
            .order_by(ProblemReportModel.session_id, ProblemReportModel.position)
            .execution_options(populate_existing=True)
        )
        grouped: dict[str, list[ProblemReportModel]] = defaultdict(list)
        for model in result.scalars().all():
            grouped[model.session_id].append(model)
        return grouped

    async def _comments_by_session(self, session_ids: list[str]) -> dict[str, list[CommentModel]]:
        result = await self.session.execute(
            select(CommentModel)
            .where(CommentModel.session_id.in_(session_ids))
            .order_by(CommentModel.session_id, CommentModel.position)
            .execution_options(populate_existing=True)
        )
        grouped: dict[str, list[CommentModel]] = defaultdict(list)
        for model in result.scalars().all():
            grouped[model.session_id].append(model)
        return grouped

    async def _delete_children(self, session_id: str) -> None:
        await self.session.execute(delete(ProblemReportModel).where(ProblemReportModel.session_id == session_id))
        await self.session.execute(delete(CommentModel).where(CommentModel.session_id == session_id))

    async def _insert_children(self, session: CollectionSession) -> None:
        if session.problems:
            await self.session.execute(
                insert(ProblemReportModel),
                [problem_values(p, i) for i, p in enumerate(session.problems)],
            )
        if session.comments:
            await self.session.execute(
                insert(CommentModel),
                [comment_values(c, i) for i, c in enumerate(session.comments)],
            )
