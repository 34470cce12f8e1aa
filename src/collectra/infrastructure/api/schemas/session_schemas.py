"""Pydantic schemas for collection session operations."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from collectra.domain.entities import ProblemPriority, ProblemStatus, SessionStatus


class SessionCreateRequest(BaseModel):
    """Request body for creating a collection session.

    Required fields are optional here so that every missing value is
    reported together by the domain validation.
    """

    supplier_id: str | None = Field(None, description="Supplier ID")
    supplier_name: str | None = Field(None, max_length=255, description="Supplier display name")
    site_location: str | None = Field(None, max_length=255, description="Pickup site")
    coordinator_id: str | None = Field(None, description="Coordinator ID")
    coordinator_name: str | None = Field(None, max_length=255, description="Coordinator display name")
    marketer_id: str | None = Field(None, description="Marketer ID")
    marketer_name: str | None = Field(None, max_length=255, description="Marketer display name")
    estimated_start_date: datetime | None = Field(None, description="Planned start")
    estimated_end_date: datetime | None = Field(None, description="Planned end")
    estimated_amount: float | None = Field(None, description="Planned amount in kg")


class TransitionRequest(BaseModel):
    """Request body for a status change."""

    status: str = Field(..., description="Target status: planned, in-progress, completed or cancelled")


class CollectionDataUpdateRequest(BaseModel):
    """Request body for saving collection data."""

    paper_types: dict[str, float] | None = Field(
        None,
        description="Quantities (kg) keyed by paper type: carton, mixed, sw, sc, np",
    )
    actual_amount: float | None = Field(
        None,
        description="Collected amount in kg; defaults to the paper-type total",
    )


class QuantityRequest(BaseModel):
    """Request body carrying a single quantity in kg."""

    quantity: float = Field(..., description="Quantity in kg")


class ProblemReportRequest(BaseModel):
    """Request body for reporting a problem."""

    description: str = Field(..., max_length=5000, description="What went wrong")
    priority: str = Field("medium", description="low, medium, high or critical")


class ProblemResolveRequest(BaseModel):
    """Request body for resolving a problem."""

    resolution: str = Field(..., max_length=5000, description="How the problem was resolved")


class CommentRequest(BaseModel):
    """Request body for adding a comment."""

    comment: str = Field(..., max_length=5000, description="Comment text")
    type: str | None = Field(None, max_length=50, description="Comment type (default: general)")


class PaperTypesResponse(BaseModel):
    """Paper-type bucket quantities."""

    carton: float
    mixed: float
    sw: float
    sc: float
    np: float

    model_config = ConfigDict(from_attributes=True)


class CollectionDataResponse(BaseModel):
    """Planned and collected amounts."""

    estimated_amount: float
    actual_amount: float | None
    paper_types: PaperTypesResponse
    paper_type_total: float
    amount_discrepancy: float | None

    model_config = ConfigDict(from_attributes=True)


class PerformanceResponse(BaseModel):
    """Scores computed on completion."""

    efficiency: int
    quality: int
    punctuality: int

    model_config = ConfigDict(from_attributes=True)


class ProblemReportResponse(BaseModel):
    """A problem report."""

    id: str
    session_id: str
    reported_by: str
    reported_date: datetime
    description: str
    priority: ProblemPriority
    status: ProblemStatus
    resolved_by: str | None = None
    resolved_date: datetime | None = None
    resolution: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CommentResponse(BaseModel):
    """A session comment."""

    id: str
    session_id: str
    author_id: str
    author_name: str
    comment: str
    timestamp: datetime
    type: str

    model_config = ConfigDict(from_attributes=True)


class SessionResponse(BaseModel):
    """A collection session with its problems and comments."""

    id: str
    session_number: str
    supplier_id: str
    supplier_name: str
    site_location: str
    coordinator_id: str
    coordinator_name: str
    marketer_id: str | None = None
    marketer_name: str | None = None
    status: SessionStatus
    estimated_start_date: datetime
    estimated_end_date: datetime
    actual_start_date: datetime | None = None
    actual_end_date: datetime | None = None
    total_time_spent: int | None = None
    collection_data: CollectionDataResponse
    performance: PerformanceResponse | None = None
    problems: list[ProblemReportResponse] = Field(default_factory=list)
    comments: list[CommentResponse] = Field(default_factory=list)
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime
    version: int

    model_config = ConfigDict(from_attributes=True)


class CollectionDataUpdateResponse(SessionResponse):
    """Session after a collection data save, with non-fatal warnings."""

    warnings: list[str] = Field(default_factory=list)


class SessionListResponse(BaseModel):
    """List of sessions."""

    items: list[SessionResponse]
    total: int


class SessionReportResponse(BaseModel):
    """Execution report for one session."""

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
    performance: PerformanceResponse | None

    model_config = ConfigDict(from_attributes=True)


class StatusSummaryResponse(BaseModel):
    """Counters across all sessions."""

    total_sessions: int
    by_status: dict[str, int]
    open_problems: int
    total_collected: float
    average_efficiency: float | None

    model_config = ConfigDict(from_attributes=True)


class FieldErrorResponse(BaseModel):
    """A single validation failure."""

    field: str
    message: str
    code: str


class ErrorResponse(BaseModel):
    """Error body returned for domain errors."""

    error: str
    message: str
    errors: list[FieldErrorResponse] | None = None
    current_version: int | None = None
