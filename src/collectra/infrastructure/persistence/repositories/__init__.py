"""Persistence repositories for collection sessions."""

from collectra.infrastructure.persistence.repositories.collection_session_repository import (
    CollectionSessionRepository,
)
from collectra.infrastructure.persistence.repositories.in_memory_session_repository import (
    InMemorySessionRepository,
)

__all__ = [
    "CollectionSessionRepository",
    "InMemorySessionRepository",
]
