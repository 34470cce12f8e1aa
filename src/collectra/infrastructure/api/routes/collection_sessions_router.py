"""Collection sessions API routes.

Thin adapter over CollectionSessionService. Domain errors propagate to the
handlers registered in app.py; each mutating route commits on success.
"""

from fastapi import APIRouter, Response, status

from collectra.domain.entities import CollectionSession
from collectra.domain.errors import AmountMismatchWarning
from collectra.domain.services import CreateSessionInput
from collectra.infrastructure.api.dependencies import (
    CurrentActor,
    DbSession,
    ExpectedVersion,
    SessionService,
)
from collectra.infrastructure.api.schemas import (
    CollectionDataUpdateRequest,
    CollectionDataUpdateResponse,
    CommentRequest,
    ErrorResponse,
    ProblemReportRequest,
    ProblemResolveRequest,
    QuantityRequest,
    SessionCreateRequest,
    SessionListResponse,
    SessionReportResponse,
    SessionResponse,
    StatusSummaryResponse,
    TransitionRequest,
)

router = APIRouter(tags=["collection-sessions"])

NOT_FOUND_RESPONSES: dict[int | str, dict] = {
    404: {"model": ErrorResponse, "description": "Collection session not found"},
}
WRITE_ERROR_RESPONSES: dict[int | str, dict] = {
    **NOT_FOUND_RESPONSES,
    409: {"model": ErrorResponse, "description": "Conflicts with the current status or version"},
    412: {"model": ErrorResponse, "description": "If-Match does not match the current version"},
}


def session_response(session: CollectionSession, response: Response) -> SessionResponse:
    """Serialize a session and expose its version as the ETag."""
    response.headers["ETag"] = f'"{session.version}"'
    return SessionResponse.model_validate(session)


@router.get("", response_model=SessionListResponse, summary="List collection sessions")
async def list_sessions(service: SessionService) -> SessionListResponse:
    """List all sessions, oldest first."""
    sessions = await service.list_sessions()
    return SessionListResponse(
        items=[SessionResponse.model_validate(s) for s in sessions],
        total=len(sessions),
    )


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a collection session",
)
async def create_session(
    request: SessionCreateRequest,
    response: Response,
    actor: CurrentActor,
    service: SessionService,
    db: DbSession,
) -> SessionResponse:
    """Create a planned session and assign its session number."""
    created = await service.create_session(CreateSessionInput(**request.model_dump()), actor)
    await db.commit()
    return session_response(created, response)


@router.get("/summary", response_model=StatusSummaryResponse, summary="Status summary")
async def get_status_summary(service: SessionService) -> StatusSummaryResponse:
    """Per-status counts and completed-session totals."""
    summary = await service.status_summary()
    return StatusSummaryResponse(
        total_sessions=summary.total_sessions,
        by_status={s.value: count for s, count in summary.by_status.items()},
        open_problems=summary.open_problems,
        total_collected=summary.total_collected,
        average_efficiency=summary.average_efficiency,
    )


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    summary="Get a collection session",
    responses=NOT_FOUND_RESPONSES,
)
async def get_session(session_id: str, response: Response, service: SessionService) -> SessionResponse:
    session = await service.get_session(session_id)
    return session_response(session, response)


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a collection session",
    responses=NOT_FOUND_RESPONSES,
)
async def delete_session(
    session_id: str,
    actor: CurrentActor,
    service: SessionService,
    db: DbSession,
) -> None:
    """Delete a session together with its problems and comments."""
    await service.delete_session(session_id, actor)
    await db.commit()


@router.post(
    "/{session_id}/transitions",
    response_model=SessionResponse,
    summary="Change session status",
    responses=WRITE_ERROR_RESPONSES,
)
async def transition_session(
    session_id: str,
    request: TransitionRequest,
    response: Response,
    actor: CurrentActor,
    expected_version: ExpectedVersion,
    service: SessionService,
    db: DbSession,
) -> SessionResponse:
    """Move the session to a new status.

    Send If-Match with the session version to reject stale requests with 412.
    """
    saved = await service.transition_session(
        session_id, request.status, actor, expected_version=expected_version
    )
    await db.commit()
    return session_response(saved, response)


@router.patch(
    "/{session_id}/collection-data",
    response_model=CollectionDataUpdateResponse,
    summary="Save collection data",
    responses=WRITE_ERROR_RESPONSES,
)
async def update_collection_data(
    session_id: str,
    request: CollectionDataUpdateRequest,
    response: Response,
    actor: CurrentActor,
    expected_version: ExpectedVersion,
    service: SessionService,
    db: DbSession,
) -> CollectionDataUpdateResponse:
    """Merge paper-type quantities and record the actual amount.

    A supplied actual amount that differs from the paper-type total is kept
    and reported under warnings.
    """
    saved = await service.update_collection_data(
        session_id,
        actor,
        paper_types=request.paper_types,
        actual_amount=request.actual_amount,
        expected_version=expected_version,
    )
    await db.commit()

    data = saved.collection_data
    warnings = []
    if data.amount_discrepancy is not None:
        warnings.append(str(AmountMismatchWarning(saved.id, data.actual_amount or 0.0, data.paper_type_total)))

    response.headers["ETag"] = f'"{saved.version}"'
    result = CollectionDataUpdateResponse.model_validate(saved)
    return result.model_copy(update={"warnings": warnings})


@router.put(
    "/{session_id}/paper-types/{paper_type}",
    response_model=SessionResponse,
    summary="Set one paper-type quantity",
    responses=WRITE_ERROR_RESPONSES,
)
async def update_paper_type(
    session_id: str,
    paper_type: str,
    request: QuantityRequest,
    response: Response,
    actor: CurrentActor,
    expected_version: ExpectedVersion,
    service: SessionService,
    db: DbSession,
) -> SessionResponse:
    saved = await service.update_paper_type(
        session_id, paper_type, request.quantity, actor, expected_version=expected_version
    )
    await db.commit()
    return session_response(saved, response)


@router.put(
    "/{session_id}/actual-amount",
    response_model=SessionResponse,
    summary="Set the collected amount",
    responses=WRITE_ERROR_RESPONSES,
)
async def update_actual_amount(
    session_id: str,
    request: QuantityRequest,
    response: Response,
    actor: CurrentActor,
    expected_version: ExpectedVersion,
    service: SessionService,
    db: DbSession,
) -> SessionResponse:
    saved = await service.update_actual_amount(
        session_id, request.quantity, actor, expected_version=expected_version
    )
    await db.commit()
    return session_response(saved, response)


@router.post(
    "/{session_id}/problems",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report a problem",
    responses=WRITE_ERROR_RESPONSES,
)
async def report_problem(
    session_id: str,
    request: ProblemReportRequest,
    response: Response,
    actor: CurrentActor,
    expected_version: ExpectedVersion,
    service: SessionService,
    db: DbSession,
) -> SessionResponse:
    """Report a problem; allowed in every status."""
    saved = await service.report_problem(
        session_id, request.description, request.priority, actor, expected_version=expected_version
    )
    await db.commit()
    return session_response(saved, response)


@router.post(
    "/{session_id}/problems/{problem_id}/resolve",
    response_model=SessionResponse,
    summary="Resolve a problem",
    responses=WRITE_ERROR_RESPONSES,
)
async def resolve_problem(
    session_id: str,
    problem_id: str,
    request: ProblemResolveRequest,
    response: Response,
    actor: CurrentActor,
    expected_version: ExpectedVersion,
    service: SessionService,
    db: DbSession,
) -> SessionResponse:
    saved = await service.resolve_problem(
        session_id, problem_id, request.resolution, actor, expected_version=expected_version
    )
    await db.commit()
    return session_response(saved, response)


@router.post(
    "/{session_id}/comments",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment",
    responses=WRITE_ERROR_RESPONSES,
)
async def add_comment(
    session_id: str,
    request: CommentRequest,
    response: Response,
    actor: CurrentActor,
    expected_version: ExpectedVersion,
    service: SessionService,
    db: DbSession,
) -> SessionResponse:
    saved = await service.add_comment(
        session_id,
        request.comment,
        actor,
        comment_type=request.type,
        expected_version=expected_version,
    )
    await db.commit()
    return session_response(saved, response)


@router.get(
    "/{session_id}/report",
    response_model=SessionReportResponse,
    summary="Session report",
    responses=NOT_FOUND_RESPONSES,
)
async def get_session_report(session_id: str, service: SessionService) -> SessionReportResponse:
    """Execution report: timing, problem counts, amounts and performance."""
    report = await service.session_report(session_id)
    return SessionReportResponse.model_validate(report)
