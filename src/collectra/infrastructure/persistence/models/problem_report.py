"""SQLAlchemy model for the session_problems table."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from collectra.infrastructure.persistence.database import Base


class ProblemReportModel(Base):
    """SQLAlchemy model for problem reports raised against a session.

    position preserves report order within the session.
    """

    __tablename__ = "session_problems"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("collection_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    reported_by: Mapped[str] = mapped_column(String(255), nullable=False)
    reported_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="open")
    resolved_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    resolved_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resolution: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("ix_session_problems_session_position", "session_id", "position"),)

    def __repr__(self) -> str:
        return f"<ProblemReport(id={self.id}, session_id={self.session_id}, status={self.status})>"
