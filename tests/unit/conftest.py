"""Pytest configuration for unit tests."""

from datetime import datetime, timezone

import pytest

from collectra.domain.entities import CollectionData, CollectionSession
from collectra.domain.services import CollectionSessionService, SequentialIdGenerator
from collectra.infrastructure.persistence.repositories import InMemorySessionRepository


@pytest.fixture
def repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def service(repository, clock) -> CollectionSessionService:
    """Service over an in-memory repository with readable IDs and a fake clock."""
    return CollectionSessionService(
        repository,
        id_generator=SequentialIdGenerator(prefix="id"),
        clock=clock,
    )


@pytest.fixture
def make_session():
    """Factory for a planned 500 kg session."""

    def factory(**overrides) -> CollectionSession:
        values = dict(
            id="ses-1",
            session_number="CS-000001",
            supplier_id="sup-1",
            supplier_name="Green Paper Mill",
            site_location="Warehouse 4",
            coordinator_id="user-1",
            coordinator_name="Dana Coordinator",
            estimated_start_date=datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc),
            estimated_end_date=datetime(2024, 3, 1, 16, 0, tzinfo=timezone.utc),
            collection_data=CollectionData(estimated_amount=500),
        )
        values.update(overrides)
        return CollectionSession(**values)

    return factory
