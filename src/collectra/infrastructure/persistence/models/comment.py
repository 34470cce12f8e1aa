"""SQLAlchemy model for the session_comments table."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from collectra.infrastructure.persistence.database import Base


class CommentModel(Base):
    """SQLAlchemy model for session comments (append-only)."""

    __tablename__ = "session_comments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("collection_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    author_id: Mapped[str] = mapped_column(String(64), nullable=False)
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="general")

    __table_args__ = (Index("ix_session_comments_session_position", "session_id", "position"),)

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, session_id={self.session_id}, author={self.author_name})>"
