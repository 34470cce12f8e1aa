"""Domain entities for Collectra.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from collectra.domain.entities.actor import Actor
from collectra.domain.entities.collection_session import (
    CollectionData,
    CollectionSession,
    Performance,
    SessionStatus,
)
from collectra.domain.entities.comment import DEFAULT_COMMENT_TYPE, Comment
from collectra.domain.entities.paper_types import PaperType, PaperTypeBuckets
from collectra.domain.entities.problem_report import (
    ProblemPriority,
    ProblemReport,
    ProblemStatus,
)

__all__ = [
    "Actor",
    "CollectionData",
    "CollectionSession",
    "Comment",
    "DEFAULT_COMMENT_TYPE",
    "PaperType",
    "PaperTypeBuckets",
    "Performance",
    "ProblemPriority",
    "ProblemReport",
    "ProblemStatus",
    "SessionStatus",
]
