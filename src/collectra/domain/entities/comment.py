"""Comment entity for the per-session note thread."""

from dataclasses import dataclass
from datetime import datetime

DEFAULT_COMMENT_TYPE = "general"


@dataclass(frozen=True)
class Comment:
    """Immutable note attached to a collection session.

    Attributes:
        id: Unique identifier.
        session_id: ID of the session the comment belongs to.
        author_id: ID of the author.
        author_name: Display name of the author.
        comment: Comment text.
        timestamp: When the comment was written.
        type: Free-form tag (e.g. "general", "site-visit").
    """

    id: str
    session_id: str
    author_id: str
    author_name: str
    comment: str
    timestamp: datetime
    type: str = DEFAULT_COMMENT_TYPE

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Comment ID is required")
        if not self.session_id:
            raise ValueError("Session ID is required")
        if not self.comment:
            raise ValueError("Comment text is required")
