"""Append-only comment log for collection sessions."""

from datetime import datetime

from collectra.domain.entities import DEFAULT_COMMENT_TYPE, Actor, CollectionSession, Comment
from collectra.domain.errors import ValidationError


class CommentLog:
    """Appends comments to a session; comments are never edited or removed."""

    def append(
        self,
        session: CollectionSession,
        comment_id: str,
        text: str,
        actor: Actor,
        now: datetime,
        comment_type: str | None = None,
    ) -> Comment:
        if not text or not text.strip():
            raise ValidationError.single(field="comment", message="Comment text is required", code="required")

        comment = Comment(
            id=comment_id,
            session_id=session.id,
            author_id=actor.id,
            author_name=actor.name,
            comment=text.strip(),
            timestamp=now,
            type=(comment_type or "").strip() or DEFAULT_COMMENT_TYPE,
        )
        session.comments.append(comment)
        return comment
