"""Identifier generators for sessions, problem reports and comments.

Storage backends pick a strategy (random UUIDs, sequential IDs) without the
domain services knowing which one is in use.
"""

import itertools
import threading
import uuid
from abc import ABC, abstractmethod


class IdGenerator(ABC):
    """Produces collision-resistant opaque identifiers."""

    @abstractmethod
    def generate(self) -> str:
        """Return a new identifier."""
        ...


class UuidIdGenerator(IdGenerator):
    """Random UUID4 identifiers (the default)."""

    def generate(self) -> str:
        return str(uuid.uuid4())


class SequentialIdGenerator(IdGenerator):
    """Monotonic identifiers, e.g. ``ses-1``, ``ses-2``.

    Unique within one process only and restarts at 1, so Settings accepts
    this strategy in the testing environment only.
    """

    def __init__(self, prefix: str = "", start: int = 1) -> None:
        self.prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def generate(self) -> str:
        with self._lock:
            value = next(self._counter)
        return f"{self.prefix}-{value}" if self.prefix else str(value)


def get_id_generator(strategy: str) -> IdGenerator:
    """Return the generator for a configured strategy name.

    Args:
        strategy: "uuid" or "sequential".

    Raises:
        ValueError: If the strategy is unknown.
    """
    if strategy == "uuid":
        return UuidIdGenerator()
    if strategy == "sequential":
        return SequentialIdGenerator()
    raise ValueError(f"Unknown ID strategy '{strategy}'")
