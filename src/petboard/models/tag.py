"""Models for the tag vocabulary and the post/tag association."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from petboard.db.session import Base

if TYPE_CHECKING:
    from .post import Post


class Tag(Base):
    """Normalized tag name with a display color fixed at first creation."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    color: Mapped[str] = mapped_column(String(16), nullable=False)


class PostTag(Base):
    """Join table mapping posts onto tags."""

    __tablename__ = "post_tags"
    __table_args__ = (Index("ix_post_tags_tag_id", "tag_id"),)

    # Composite primary key keeps each (post, tag) pair unique.
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    )

    post: Mapped[Post] = relationship("Post", back_populates="post_tags")
    tag: Mapped[Tag] = relationship("Tag")
