"""Session repository interface (repository pattern).

Repositories must be swappable and return domain entities. Writes use
compare-and-swap on the session's version so that two writers working from
the same loaded version cannot both succeed.
"""

from abc import ABC, abstractmethod

from collectra.domain.entities import CollectionSession


class SessionRepository(ABC):
    """Interface for collection session persistence."""

    @abstractmethod
    async def load(self, session_id: str) -> CollectionSession:
        """Return the session with its problems and comments.

        Raises:
            NotFoundError: If no session has this ID.
        """
        ...

    @abstractmethod
    async def add(self, session: CollectionSession) -> CollectionSession:
        """Insert a new session.

        Raises:
            ConflictError: If the ID or session number is already taken.
        """
        ...

    @abstractmethod
    async def save(self, session: CollectionSession, expected_version: int) -> CollectionSession:
        """Replace the stored session if its version still equals expected_version.

        On success the returned session carries the incremented version.

        Raises:
            NotFoundError: If the session no longer exists.
            ConflictError: If the stored version differs from expected_version.
        """
        ...

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """Remove the session together with its problems and comments.

        Raises:
            NotFoundError: If no session has this ID.
        """
        ...

    @abstractmethod
    async def list_all(self) -> list[CollectionSession]:
        """Return all sessions ordered by creation time, oldest first."""
        ...

    @abstractmethod
    async def list_session_numbers(self) -> list[str]:
        """Return the session numbers already in use."""
        ...
