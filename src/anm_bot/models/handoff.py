"""SQLAlchemy Handoff model."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""


class Handoff(Base):
    """A conversation handed over to a human advisor.

    One row is written each time a correspondent reaches the
    ``with_agent`` stage.
    """

    __tablename__ = "handoffs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    correspondent_id: Mapped[str] = mapped_column(
        String(128), nullable=False, doc="Messaging address of the correspondent"
    )
    topic: Mapped[str] = mapped_column(
        String(256), nullable=False, doc="Service option or combo that was requested"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    __table_args__ = (
        Index("ix_handoffs_correspondent_id", "correspondent_id"),
        Index("ix_handoffs_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Handoff id={self.id} correspondent={self.correspondent_id!r} topic={self.topic!r}>"
