"""FastAPI dependencies for actor identity and service wiring.

Token issuance and verification happen upstream; the gateway forwards the
authenticated identity in the X-Actor-Id and X-Actor-Name headers.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from collectra.core.config import Settings, get_settings
from collectra.core.logging import get_logger
from collectra.domain.entities import Actor
from collectra.domain.services import (
    CollectionSessionService,
    ConstantScoringStrategy,
    IdGenerator,
    PerformanceCalculator,
    SessionLifecycle,
    SessionNumberGenerator,
    get_id_generator,
)
from collectra.infrastructure.persistence.database import get_db_session
from collectra.infrastructure.persistence.repositories import CollectionSessionRepository

logger = get_logger(__name__)


async def get_current_actor(
    x_actor_id: Annotated[str | None, Header()] = None,
    x_actor_name: Annotated[str | None, Header()] = None,
) -> Actor:
    """Build the acting identity from request headers.

    Args:
        x_actor_id: The X-Actor-Id header value.
        x_actor_name: The X-Actor-Name header value (defaults to the ID).

    Returns:
        Actor: The identity performing the request.

    Raises:
        HTTPException: 401 if X-Actor-Id is missing or blank.
    """
    if x_actor_id is None or not x_actor_id.strip():
        logger.info("Request rejected: missing X-Actor-Id header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Actor-Id header",
        )

    actor_id = x_actor_id.strip()
    actor_name = (x_actor_name or "").strip() or actor_id
    return Actor(id=actor_id, name=actor_name)


async def get_expected_version(
    if_match: Annotated[str | None, Header()] = None,
) -> int | None:
    """Parse the If-Match header into an expected session version.

    Accepts ``3``, ``"3"`` and ``W/"3"``.

    Raises:
        HTTPException: 400 if the header is present but not a version number.
    """
    if if_match is None:
        return None

    value = if_match.strip()
    if value.startswith("W/"):
        value = value[2:]
    value = value.strip('"')
    try:
        return int(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="If-Match must carry a session version number",
        )


@lru_cache
def get_shared_id_generator(strategy: str) -> IdGenerator:
    """Return one generator per strategy for the whole process.

    Sequential IDs would restart on every request otherwise.
    """
    return get_id_generator(strategy)


def build_session_service(session: AsyncSession, settings: Settings) -> CollectionSessionService:
    """Wire a CollectionSessionService on top of a database session."""
    scoring = ConstantScoringStrategy(
        quality=settings.default_quality_score,
        punctuality=settings.default_punctuality_score,
    )
    return CollectionSessionService(
        repository=CollectionSessionRepository(session),
        id_generator=get_shared_id_generator(settings.id_strategy),
        number_generator=SessionNumberGenerator(settings.session_number_prefix),
        lifecycle=SessionLifecycle(PerformanceCalculator(scoring)),
    )


def get_session_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> CollectionSessionService:
    """Get the collection session service for the request's database session."""
    return build_session_service(session, get_settings())


# Type aliases for dependency injection
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
ExpectedVersion = Annotated[int | None, Depends(get_expected_version)]
SessionService = Annotated[CollectionSessionService, Depends(get_session_service)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
