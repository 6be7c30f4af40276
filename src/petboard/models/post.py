"""SQLAlchemy models for posts and their moderation attributes."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from petboard.db.session import Base
from petboard.db.time import utcnow

if TYPE_CHECKING:
    from .comment import Comment
    from .like import PostLike
    from .tag import PostTag
    from .user import User


class Category(str, enum.Enum):
    """Closed set of post categories; extended only by redeploying."""

    GATOS = "Gatos"
    CACHORROS = "Cachorros"


class PostStatus(str, enum.Enum):
    """Moderation status gating public visibility."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Post(Base):
    """Authored content subject to moderation.

    Posts start in ``pending`` and only become visible on public feeds once a
    moderator approves them. At most one post carries ``is_featured``.
    """

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_status_created", "status", "created_at"),
        Index("ix_posts_author", "user_id"),
        # Store-level guard for the featured singleton.
        Index(
            "uq_posts_single_featured",
            "is_featured",
            unique=True,
            sqlite_where=text("is_featured = 1"),
            postgresql_where=text("is_featured IS TRUE"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(
        "user_id",
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[Category] = mapped_column(
        Enum(Category, native_enum=False, length=32, values_callable=_enum_values),
        nullable=False,
    )
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[PostStatus] = mapped_column(
        Enum(PostStatus, native_enum=False, length=16, values_callable=_enum_values),
        nullable=False,
        default=PostStatus.PENDING,
    )
    # Moderation metadata stays NULL while the post is pending.
    reviewed_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    featured_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    author: Mapped[User] = relationship("User", foreign_keys=[author_id])
    post_tags: Mapped[list[PostTag]] = relationship(
        "PostTag",
        back_populates="post",
        cascade="all, delete-orphan",
    )
    likes: Mapped[list[PostLike]] = relationship(
        "PostLike",
        back_populates="post",
        cascade="all, delete-orphan",
    )
    comments: Mapped[list[Comment]] = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
    )
