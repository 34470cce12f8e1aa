"""Collection session service.

Caller-facing operations on collection sessions. Every mutating operation
loads the session, applies the change to a working copy and saves it with
the version it loaded, so either every side effect lands or none does.
"""

import copy
import warnings
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TypeVar

from collectra.core.logging import get_logger
from collectra.domain.entities import (
    Actor,
    CollectionData,
    CollectionSession,
    PaperType,
    PaperTypeBuckets,
    ProblemPriority,
    SessionStatus,
)
from collectra.domain.errors import (
    AmountMismatchWarning,
    ConflictError,
    FieldError,
    InvalidStateError,
    ValidationError,
)
from collectra.domain.repositories import SessionRepository
from collectra.domain.services.comment_log import CommentLog
from collectra.domain.services.identifier_generator import IdGenerator, UuidIdGenerator
from collectra.domain.services.paper_type_ledger import PaperTypeLedger
from collectra.domain.services.problem_tracker import ProblemTracker
from collectra.domain.services.session_lifecycle import SessionLifecycle
from collectra.domain.services.session_number_generator import SessionNumberGenerator
from collectra.domain.services.session_reporting import (
    SessionReport,
    StatusSummary,
    build_session_report,
    summarize_sessions,
)

logger = get_logger(__name__)

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CreateSessionInput:
    """Input for creating a collection session.

    Fields are optional at the type level so that missing values surface as
    a ValidationError listing every problem at once.
    """

    supplier_id: str | None = None
    supplier_name: str | None = None
    site_location: str | None = None
    coordinator_id: str | None = None
    coordinator_name: str | None = None
    marketer_id: str | None = None
    marketer_name: str | None = None
    estimated_start_date: datetime | None = None
    estimated_end_date: datetime | None = None
    estimated_amount: float | None = None


REQUIRED_CREATE_FIELDS = (
    "supplier_id",
    "coordinator_id",
    "site_location",
    "estimated_start_date",
    "estimated_end_date",
    "estimated_amount",
)


def validate_create_input(data: CreateSessionInput) -> list[FieldError]:
    """Return every validation failure of a create request."""
    errors: list[FieldError] = []

    for name in REQUIRED_CREATE_FIELDS:
        value = getattr(data, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append(FieldError(field=name, message="Field is required", code="required"))

    if data.estimated_amount is not None:
        error = PaperTypeLedger.quantity_error("estimated_amount", data.estimated_amount)
        if error:
            errors.append(error)

    start, end = data.estimated_start_date, data.estimated_end_date
    if start is not None and end is not None:
        if (start.tzinfo is None) != (end.tzinfo is None):
            errors.append(
                FieldError(
                    field="estimated_end_date",
                    message="Start and end dates must both include or both omit a timezone",
                    code="invalid_date_range",
                )
            )
        elif start > end:
            errors.append(
                FieldError(
                    field="estimated_end_date",
                    message="End date must not be before start date",
                    code="invalid_date_range",
                )
            )

    return errors


class CollectionSessionService:
    """Service for collection session business logic."""

    def __init__(
        self,
        repository: SessionRepository,
        id_generator: IdGenerator | None = None,
        number_generator: SessionNumberGenerator | None = None,
        lifecycle: SessionLifecycle | None = None,
        problem_tracker: ProblemTracker | None = None,
        comment_log: CommentLog | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Session persistence.
            id_generator: Generator for session, problem and comment IDs.
            number_generator: Generator for human-readable session numbers.
            lifecycle: Status state machine (holds the performance calculator).
            problem_tracker: Problem report rules.
            comment_log: Comment rules.
            clock: Returns the current time; injectable for tests.
        """
        self.repository = repository
        self.id_generator = id_generator or UuidIdGenerator()
        self.number_generator = number_generator or SessionNumberGenerator()
        self.lifecycle = lifecycle or SessionLifecycle()
        self.problem_tracker = problem_tracker or ProblemTracker()
        self.comment_log = comment_log or CommentLog()
        self.clock = clock

    async def create_session(self, data: CreateSessionInput, actor: Actor) -> CollectionSession:
        """Create a planned session.

        Raises:
            ValidationError: If required fields are missing or the dates are reversed.
            ConflictError: If the generated session number was taken concurrently.
        """
        errors = validate_create_input(data)
        if errors:
            logger.info(
                "Session creation rejected",
                actor_id=actor.id,
                fields=[e.field for e in errors],
            )
            raise ValidationError(errors)

        now = self.clock()
        existing_numbers = await self.repository.list_session_numbers()

        session = CollectionSession(
            id=self.id_generator.generate(),
            session_number=self.number_generator.generate(existing_numbers),
            supplier_id=str(data.supplier_id),
            supplier_name=data.supplier_name or "",
            site_location=str(data.site_location).strip(),
            coordinator_id=str(data.coordinator_id),
            coordinator_name=data.coordinator_name or "",
            marketer_id=data.marketer_id,
            marketer_name=data.marketer_name,
            estimated_start_date=data.estimated_start_date,
            estimated_end_date=data.estimated_end_date,
            collection_data=CollectionData(
                estimated_amount=float(data.estimated_amount),
                paper_types=PaperTypeBuckets(),
            ),
            created_by=actor.id,
            created_at=now,
            updated_at=now,
        )
        created = await self.repository.add(session)

        logger.info(
            "Session created",
            session_id=created.id,
            session_number=created.session_number,
            supplier_id=created.supplier_id,
            actor_id=actor.id,
        )
        return created

    async def get_session(self, session_id: str) -> CollectionSession:
        """Return a session.

        Raises:
            NotFoundError: If the session does not exist.
        """
        return await self.repository.load(session_id)

    async def list_sessions(self) -> list[CollectionSession]:
        return await self.repository.list_all()

    async def transition_session(
        self,
        session_id: str,
        target_status: str | SessionStatus,
        actor: Actor,
        expected_version: int | None = None,
    ) -> CollectionSession:
        """Move a session along the status graph.

        Raises:
            NotFoundError: If the session does not exist.
            ValidationError: If target_status is not a known status.
            InvalidTransitionError: If the move is not allowed from the current status.
            ConflictError: If the session changed since expected_version or concurrently.
        """
        previous: dict[str, SessionStatus] = {}

        def mutate(session: CollectionSession) -> None:
            previous["status"] = session.status
            self.lifecycle.apply(session, target_status, self.clock())

        saved = await self._mutate(session_id, actor, mutate, expected_version)

        logger.info(
            "Session transitioned",
            session_id=saved.id,
            from_status=previous["status"].value,
            to_status=saved.status.value,
            actor_id=actor.id,
            version=saved.version,
        )
        if saved.status == SessionStatus.COMPLETED and saved.performance is not None:
            logger.info(
                "Session performance computed",
                session_id=saved.id,
                efficiency=saved.performance.efficiency,
                quality=saved.performance.quality,
                punctuality=saved.performance.punctuality,
                total_time_spent=saved.total_time_spent,
            )
        return saved

    async def update_paper_type(
        self,
        session_id: str,
        paper_type: str | PaperType,
        quantity: float,
        actor: Actor,
        expected_version: int | None = None,
    ) -> CollectionSession:
        """Set one paper-type bucket.

        Raises:
            InvalidStateError: If the session is completed or cancelled.
            ValidationError: If the paper type or quantity is invalid.
        """

        def mutate(session: CollectionSession) -> None:
            self._require_open(session)
            PaperTypeLedger.set_quantity(session.collection_data, paper_type, quantity)

        return await self._mutate(session_id, actor, mutate, expected_version)

    async def update_actual_amount(
        self,
        session_id: str,
        quantity: float,
        actor: Actor,
        expected_version: int | None = None,
    ) -> CollectionSession:
        """Record the collected amount.

        Raises:
            InvalidStateError: If the session is completed or cancelled.
            ValidationError: If the quantity is invalid.
        """

        def mutate(session: CollectionSession) -> None:
            self._require_open(session)
            PaperTypeLedger.set_actual_amount(session.collection_data, quantity)

        return await self._mutate(session_id, actor, mutate, expected_version)

    async def update_collection_data(
        self,
        session_id: str,
        actor: Actor,
        paper_types: Mapping[str, float] | None = None,
        actual_amount: float | None = None,
        expected_version: int | None = None,
    ) -> CollectionSession:
        """Save collection data.

        Merges the supplied paper-type buckets. The actual amount becomes
        the supplied value or, when none is supplied, the bucket total. A
        supplied value that disagrees with the bucket total is kept and an
        AmountMismatchWarning is issued.

        Raises:
            InvalidStateError: If the session is completed or cancelled.
            ValidationError: If any paper type or quantity is invalid.
        """

        def mutate(session: CollectionSession) -> float | None:
            self._require_open(session)
            return PaperTypeLedger.save(session.collection_data, paper_types, actual_amount)

        saved, discrepancy = await self._mutate_with_result(session_id, actor, mutate, expected_version)

        if discrepancy is not None:
            data = saved.collection_data
            logger.info(
                "Actual amount differs from paper-type total",
                session_id=saved.id,
                actual_amount=data.actual_amount,
                paper_type_total=data.paper_type_total,
                discrepancy=discrepancy,
            )
            warnings.warn(
                AmountMismatchWarning(saved.id, data.actual_amount or 0.0, data.paper_type_total),
                stacklevel=2,
            )
        return saved

    async def report_problem(
        self,
        session_id: str,
        description: str,
        priority: str | ProblemPriority,
        actor: Actor,
        expected_version: int | None = None,
    ) -> CollectionSession:
        """Report a problem on a session (allowed in every status).

        Raises:
            NotFoundError: If the session does not exist.
            ValidationError: If the description is blank or the priority unknown.
        """
        reported: list[str] = []

        def mutate(session: CollectionSession) -> None:
            problem = self.problem_tracker.report(
                session,
                problem_id=self.id_generator.generate(),
                description=description,
                priority=priority,
                actor=actor,
                now=self.clock(),
            )
            reported.append(problem.id)

        saved = await self._mutate(session_id, actor, mutate, expected_version)
        logger.info(
            "Problem reported",
            session_id=saved.id,
            problem_id=reported[0],
            priority=str(getattr(priority, "value", priority)),
            actor_id=actor.id,
        )
        return saved

    async def resolve_problem(
        self,
        session_id: str,
        problem_id: str,
        resolution: str,
        actor: Actor,
        expected_version: int | None = None,
    ) -> CollectionSession:
        """Resolve an open problem report.

        Raises:
            NotFoundError: If the session or problem report does not exist.
            InvalidStateError: If the problem report is already resolved.
            ValidationError: If the resolution is blank.
        """

        def mutate(session: CollectionSession) -> None:
            self.problem_tracker.resolve(
                session,
                problem_id=problem_id,
                resolution=resolution,
                actor=actor,
                now=self.clock(),
            )

        saved = await self._mutate(session_id, actor, mutate, expected_version)
        logger.info("Problem resolved", session_id=saved.id, problem_id=problem_id, actor_id=actor.id)
        return saved

    async def add_comment(
        self,
        session_id: str,
        text: str,
        actor: Actor,
        comment_type: str | None = None,
        expected_version: int | None = None,
    ) -> CollectionSession:
        """Append a comment (allowed in every status).

        Raises:
            NotFoundError: If the session does not exist.
            ValidationError: If the text is blank.
        """

        def mutate(session: CollectionSession) -> None:
            self.comment_log.append(
                session,
                comment_id=self.id_generator.generate(),
                text=text,
                actor=actor,
                now=self.clock(),
                comment_type=comment_type,
            )

        saved = await self._mutate(session_id, actor, mutate, expected_version)
        logger.debug("Comment added", session_id=saved.id, actor_id=actor.id)
        return saved

    async def delete_session(self, session_id: str, actor: Actor) -> None:
        """Delete a session with its problems and comments.

        Raises:
            NotFoundError: If the session does not exist.
        """
        await self.repository.delete(session_id)
        logger.info("Session deleted", session_id=session_id, actor_id=actor.id)

    async def session_report(self, session_id: str) -> SessionReport:
        session = await self.repository.load(session_id)
        return build_session_report(session)

    async def status_summary(self) -> StatusSummary:
        sessions = await self.repository.list_all()
        return summarize_sessions(sessions)

    @staticmethod
    def _require_open(session: CollectionSession) -> None:
        if session.is_terminal:
            raise InvalidStateError(
                f"Collection data cannot be changed on a {session.status.value} session"
            )

    async def _mutate(
        self,
        session_id: str,
        actor: Actor,
        mutate: Callable[[CollectionSession], object],
        expected_version: int | None,
    ) -> CollectionSession:
        saved, _ = await self._mutate_with_result(session_id, actor, mutate, expected_version)
        return saved

    async def _mutate_with_result(
        self,
        session_id: str,
        actor: Actor,
        mutate: Callable[[CollectionSession], T],
        expected_version: int | None,
    ) -> tuple[CollectionSession, T]:
        """Load, apply mutate to a working copy, and compare-and-swap it back.

        The loaded session is never modified, so a rejected change leaves
        nothing behind for the caller or the repository.
        """
        stored = await self.repository.load(session_id)
        if expected_version is not None and stored.version != expected_version:
            logger.info(
                "Stale session version rejected",
                session_id=session_id,
                expected_version=expected_version,
                actual_version=stored.version,
                actor_id=actor.id,
            )
            raise ConflictError(session_id, expected_version, stored.version)

        working = copy.deepcopy(stored)
        result = mutate(working)
        working.updated_at = self.clock()

        saved = await self.repository.save(working, expected_version=stored.version)
        return saved, result
