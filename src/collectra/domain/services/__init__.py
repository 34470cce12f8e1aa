"""Domain services for Collectra.

Services contain business logic that doesn't naturally fit within a single entity.
They have no dependencies on infrastructure or external frameworks.
"""

from collectra.domain.services.comment_log import CommentLog
from collectra.domain.services.identifier_generator import (
    IdGenerator,
    SequentialIdGenerator,
    UuidIdGenerator,
    get_id_generator,
)
from collectra.domain.services.paper_type_ledger import PaperTypeLedger
from collectra.domain.services.performance_calculator import (
    ConstantScoringStrategy,
    PerformanceCalculator,
    ScoringStrategy,
    calculate_efficiency,
    round_half_up,
)
from collectra.domain.services.problem_tracker import ProblemTracker
from collectra.domain.services.session_lifecycle import (
    ALLOWED_TRANSITIONS,
    SessionLifecycle,
    hours_between,
)
from collectra.domain.services.session_number_generator import (
    SessionNumberExhaustedError,
    SessionNumberGenerator,
)
from collectra.domain.services.session_reporting import (
    SessionReport,
    StatusSummary,
    build_session_report,
    summarize_sessions,
)
from collectra.domain.services.session_service import (
    CollectionSessionService,
    CreateSessionInput,
    validate_create_input,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "CollectionSessionService",
    "CommentLog",
    "ConstantScoringStrategy",
    "CreateSessionInput",
    "IdGenerator",
    "PaperTypeLedger",
    "PerformanceCalculator",
    "ProblemTracker",
    "ScoringStrategy",
    "SequentialIdGenerator",
    "SessionLifecycle",
    "SessionNumberExhaustedError",
    "SessionNumberGenerator",
    "SessionReport",
    "StatusSummary",
    "UuidIdGenerator",
    "build_session_report",
    "calculate_efficiency",
    "get_id_generator",
    "hours_between",
    "round_half_up",
    "summarize_sessions",
    "validate_create_input",
]
