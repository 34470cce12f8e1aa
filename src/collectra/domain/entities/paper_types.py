"""Paper-type buckets tracked per collection session."""

from dataclasses import dataclass
from enum import Enum


class PaperType(str, Enum):
    """Recognized recovered-material categories."""

    CARTON = "carton"
    MIXED = "mixed"
    SORTED_WHITE = "sw"
    SORTED_COLOR = "sc"
    NEWSPAPER = "np"


@dataclass
class PaperTypeBuckets:
    """Collected quantity (kg) per paper type.

    Attributes:
        carton: Corrugated carton.
        mixed: Mixed paper.
        sw: Sorted white paper.
        sc: Sorted colour paper.
        np: Newspaper.
    """

    carton: float = 0.0
    mixed: float = 0.0
    sw: float = 0.0
    sc: float = 0.0
    np: float = 0.0

    def __post_init__(self) -> None:
        """Validate bucket quantities after initialization."""
        for paper_type in PaperType:
            if getattr(self, paper_type.value) < 0:
                raise ValueError(f"Quantity for '{paper_type.value}' cannot be negative")

    @property
    def total(self) -> float:
        """Sum of all five buckets."""
        return self.carton + self.mixed + self.sw + self.sc + self.np

    def get(self, paper_type: PaperType) -> float:
        return getattr(self, paper_type.value)

    def set(self, paper_type: PaperType, quantity: float) -> None:
        setattr(self, paper_type.value, quantity)

    def as_dict(self) -> dict[str, float]:
        return {paper_type.value: self.get(paper_type) for paper_type in PaperType}
