"""SQLAlchemy model for the collection_sessions table.

One row per collection session. Problem reports and comments live in their
own tables keyed by session_id.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from collectra.infrastructure.persistence.database import Base


class CollectionSessionModel(Base):
    """SQLAlchemy model for the collection_sessions table.

    The version column backs optimistic locking: every write is an
    UPDATE ... WHERE version = :expected that bumps it by one.
    """

    __tablename__ = "collection_sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, comment="Session ID")
    session_number: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        unique=True,
        comment="Human-readable session number (e.g. CS-000001)",
    )
    supplier_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    supplier_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    site_location: Mapped[str] = mapped_column(String(255), nullable=False)
    coordinator_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    coordinator_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    marketer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    marketer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="planned",
        comment="planned, in-progress, completed or cancelled",
    )
    estimated_start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    estimated_end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    actual_start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    actual_end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    total_time_spent: Mapped[int | None] = mapped_column(
        Integer, nullable=True, comment="Whole hours between actual start and end"
    )

    estimated_amount: Mapped[float] = mapped_column(Float, nullable=False)
    actual_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    carton: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    mixed: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    sw: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    sc: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    np: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    efficiency: Mapped[int | None] = mapped_column(Integer, nullable=True)
    quality: Mapped[int | None] = mapped_column(Integer, nullable=True)
    punctuality: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        Index("ix_collection_sessions_status", "status"),
        Index("ix_collection_sessions_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<CollectionSession(id={self.id}, number={self.session_number}, status={self.status})>"
