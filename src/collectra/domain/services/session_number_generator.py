"""Session number generator service.

Generates human-readable session numbers in PREFIX-###### format
(e.g. CS-000001). Provides validation and collision prevention.
"""

import re
from typing import Iterable


class SessionNumberExhaustedError(Exception):
    """Raised when all possible session numbers for a prefix have been used."""

    def __init__(self, prefix: str) -> None:
        super().__init__(
            f"All 999,999 session numbers for prefix '{prefix}' have been used. "
            "Configure a different session number prefix."
        )


class SessionNumberGenerator:
    """Generator for session numbers in PREFIX-###### format.

    Numbers are allocated by taking the highest existing number for the
    prefix and incrementing. Numbers with other prefixes are ignored.
    Nothing is persisted beyond the sessions themselves: deleting the newest
    session frees its number for the next one, while gaps left by older
    deletions are never refilled.

    Example numbers: CS-000001, CS-000042, CS-999999
    """

    DIGITS = 6
    MAX_NUMBER = 999_999

    def __init__(self, prefix: str = "CS") -> None:
        self.prefix = prefix
        self.pattern = re.compile(rf"^{re.escape(prefix)}-(\d{{{self.DIGITS}}})$")

    def validate(self, session_number: str) -> bool:
        """Validate that a session number matches this generator's format.

        Examples:
            >>> SessionNumberGenerator("CS").validate("CS-000123")
            True
            >>> SessionNumberGenerator("CS").validate("CS-123")
            False
        """
        if not isinstance(session_number, str):
            return False
        return bool(self.pattern.match(session_number))

    def format(self, number: int) -> str:
        return f"{self.prefix}-{number:0{self.DIGITS}d}"

    def generate(self, existing_numbers: Iterable[str] | None = None) -> str:
        """Generate the next unused session number.

        The caller must fetch existing_numbers and insert the new session
        inside one unit of work; a concurrent insert of the same number is
        rejected by the repository's uniqueness check.

        Args:
            existing_numbers: Session numbers already in use.

        Returns:
            A new session number.

        Raises:
            SessionNumberExhaustedError: If the prefix has no numbers left.

        Examples:
            >>> SessionNumberGenerator("CS").generate([])
            'CS-000001'
            >>> SessionNumberGenerator("CS").generate(["CS-000001", "CS-000007"])
            'CS-000008'
        """
        highest = 0
        for session_number in existing_numbers or ():
            match = self.pattern.match(session_number) if isinstance(session_number, str) else None
            if match:
                highest = max(highest, int(match.group(1)))

        next_number = highest + 1
        if next_number > self.MAX_NUMBER:
            raise SessionNumberExhaustedError(self.prefix)
        return self.format(next_number)
