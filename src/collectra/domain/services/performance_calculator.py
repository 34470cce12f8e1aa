"""Performance calculator for completed collection sessions.

Efficiency is derived from planned vs. collected amounts. Quality and
punctuality come from a pluggable scoring strategy.
"""

import math
from abc import ABC, abstractmethod

from collectra.domain.entities import CollectionSession, Performance


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's round() uses banker's rounding (2.5 -> 2); scores and hours
    are rounded the conventional way (2.5 -> 3).
    """
    return math.floor(value + 0.5)


def calculate_efficiency(estimated_amount: float, actual_amount: float | None) -> int:
    """Actual amount as a percentage of the estimate.

    Not capped at 100: collecting more than planned yields a score above 100.
    Returns 0 when there is no positive estimate.

    Examples:
        >>> calculate_efficiency(500, 450)
        90
        >>> calculate_efficiency(100, 150)
        150
        >>> calculate_efficiency(0, 150)
        0
    """
    if estimated_amount <= 0:
        return 0
    return round_half_up(((actual_amount or 0) / estimated_amount) * 100)


class ScoringStrategy(ABC):
    """Scores the qualitative side of a completed session."""

    @abstractmethod
    def quality(self, session: CollectionSession) -> int:
        ...

    @abstractmethod
    def punctuality(self, session: CollectionSession) -> int:
        ...


class ConstantScoringStrategy(ScoringStrategy):
    """Assigns fixed quality and punctuality scores to every session.

    These scores do not look at the session at all. They are placeholders
    until product owners define real quality and punctuality rules; swap in
    another ScoringStrategy rather than editing the constants.
    """

    def __init__(self, quality: int = 90, punctuality: int = 100) -> None:
        self._quality = quality
        self._punctuality = punctuality

    def quality(self, session: CollectionSession) -> int:
        return self._quality

    def punctuality(self, session: CollectionSession) -> int:
        return self._punctuality


class PerformanceCalculator:
    """Derives the Performance of a session at completion."""

    def __init__(self, scoring: ScoringStrategy | None = None) -> None:
        self.scoring = scoring or ConstantScoringStrategy()

    def calculate(self, session: CollectionSession) -> Performance:
        data = session.collection_data
        return Performance(
            efficiency=calculate_efficiency(data.estimated_amount, data.actual_amount),
            quality=self.scoring.quality(session),
            punctuality=self.scoring.punctuality(session),
        )
