"""SQLAlchemy models for Collectra tables.

All models inherit from the Base class defined in database.py and are
created on application startup by init_database().
"""

from collectra.infrastructure.persistence.models.collection_session import CollectionSessionModel
from collectra.infrastructure.persistence.models.comment import CommentModel
from collectra.infrastructure.persistence.models.problem_report import ProblemReportModel

__all__ = [
    "CollectionSessionModel",
    "CommentModel",
    "ProblemReportModel",
]
