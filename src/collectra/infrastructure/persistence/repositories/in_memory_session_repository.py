"""In-memory session repository.

Keeps deep copies of sessions so callers can never mutate stored state by
holding on to a returned object. Used by tests and by embedders that do not
need a database.
"""

import asyncio
import copy

from collectra.domain.entities import CollectionSession
from collectra.domain.errors import ConflictError, NotFoundError
from collectra.domain.repositories import SessionRepository


class InMemorySessionRepository(SessionRepository):
    """Dictionary-backed SessionRepository with compare-and-swap saves."""

    def __init__(self) -> None:
        self._sessions: dict[str, CollectionSession] = {}
        self._lock = asyncio.Lock()

    async def load(self, session_id: str) -> CollectionSession:
        stored = self._sessions.get(session_id)
        if stored is None:
            raise NotFoundError("Collection session", session_id)
        return copy.deepcopy(stored)

    async def add(self, session: CollectionSession) -> CollectionSession:
        async with self._lock:
            if session.id in self._sessions:
                raise ConflictError(session.id, message="Session ID already exists")
            if any(s.session_number == session.session_number for s in self._sessions.values()):
                raise ConflictError(session.id, message="Session number already exists")
            session.version = 1
            self._sessions[session.id] = copy.deepcopy(session)
        return copy.deepcopy(session)

    async def save(self, session: CollectionSession, expected_version: int) -> CollectionSession:
        async with self._lock:
            stored = self._sessions.get(session.id)
            if stored is None:
                raise NotFoundError("Collection session", session.id)
            if stored.version != expected_version:
                raise ConflictError(session.id, expected_version, stored.version)
            saved = copy.deepcopy(session)
            saved.version = expected_version + 1
            self._sessions[session.id] = saved
        return copy.deepcopy(saved)

    async def delete(self, session_id: str) -> None:
        async with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise NotFoundError("Collection session", session_id)

    async def list_all(self) -> list[CollectionSession]:
        ordered = sorted(self._sessions.values(), key=lambda s: (s.created_at, s.session_number))
        return [copy.deepcopy(s) for s in ordered]

    async def list_session_numbers(self) -> list[str]:
        return [s.session_number for s in self._sessions.values()]
