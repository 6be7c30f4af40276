"""Follow edges between users."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from petboard.db.session import Base
from petboard.db.time import utcnow


class Follow(Base):
    """Directed edge: ``follower_id`` follows ``following_id``.

    Self-follows are rejected by the interaction ledger, not by the table.
    """

    __tablename__ = "follows"
    __table_args__ = (Index("ix_follows_following_id", "following_id"),)

    follower_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    following_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
