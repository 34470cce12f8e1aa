"""API schemas for request/response validation."""

from collectra.infrastructure.api.schemas.session_schemas import (
    CollectionDataResponse,
    CollectionDataUpdateRequest,
    CollectionDataUpdateResponse,
    CommentRequest,
    CommentResponse,
    ErrorResponse,
    FieldErrorResponse,
    PaperTypesResponse,
    PerformanceResponse,
    ProblemReportRequest,
    ProblemReportResponse,
    ProblemResolveRequest,
    QuantityRequest,
    SessionCreateRequest,
    SessionListResponse,
    SessionReportResponse,
    SessionResponse,
    StatusSummaryResponse,
    TransitionRequest,
)

__all__ = [
    "CollectionDataResponse",
    "CollectionDataUpdateRequest",
    "CollectionDataUpdateResponse",
    "CommentRequest",
    "CommentResponse",
    "ErrorResponse",
    "FieldErrorResponse",
    "PaperTypesResponse",
    "PerformanceResponse",
    "ProblemReportRequest",
    "ProblemReportResponse",
    "ProblemResolveRequest",
    "QuantityRequest",
    "SessionCreateRequest",
    "SessionListResponse",
    "SessionReportResponse",
    "SessionResponse",
    "StatusSummaryResponse",
    "TransitionRequest",
]
