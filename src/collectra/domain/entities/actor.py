"""Actor entity: the identity performing an operation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation.

    Passed explicitly to every mutating operation so that audit fields
    (reported_by, resolved_by, author) never depend on ambient state.

    Attributes:
        id: Identifier of the user in the identity provider.
        name: Display name recorded on problem reports and comments.
    """

    id: str
    name: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Actor ID is required")
        if not self.name:
            raise ValueError("Actor name is required")
