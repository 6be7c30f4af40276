"""Data access helpers for working with posts."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from petboard.models.post import Category, Post, PostStatus

__all__ = ["PostRepository"]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        return self.session.get(Post, post_id)

    def exists(self, post_id: int) -> bool:
        """Return True when a post with ``post_id`` exists."""
        stmt = select(Post.id).where(Post.id == post_id)
        return self.session.execute(stmt).first() is not None

    def create(
        self,
        *,
        author_id: int,
        title: str,
        content: str,
        category: Category,
        image_url: str | None,
    ) -> Post:
        """Insert a new pending post and return the persisted ORM instance."""
        post = Post(
            author_id=author_id,
            title=title,
            content=content,
            category=category,
            image_url=image_url,
            status=PostStatus.PENDING,
            is_featured=False,
        )
        self.session.add(post)
        self.session.flush()
        return post

    def apply_changes(self, post: Post, changes: dict[str, object]) -> Post:
        """Copy already-validated column values onto ``post``."""
        for field_name, value in changes.items():
            setattr(post, field_name, value)
        self.session.flush()
        return post

    def delete(self, post: Post) -> None:
        """Delete a post; tags, likes and comments cascade with it."""
        self.session.delete(post)
        self.session.flush()

    def clear_featured(self) -> int:
        """Unset the featured flag wherever it is set and return the row count."""
        result = self.session.execute(
            update(Post)
            .where(Post.is_featured.is_(True))
            .values(is_featured=False, featured_at=None)
        )
        return result.rowcount or 0

    def set_featured_flag(self, post_id: int, featured_at: datetime | None) -> int:
        """Set or clear the featured flag on one post."""
        result = self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(is_featured=featured_at is not None, featured_at=featured_at)
        )
        return result.rowcount or 0

    def record_review(
        self,
        post_id: int,
        *,
        status: PostStatus,
        reviewer_id: int,
        reviewed_at: datetime,
        rejection_reason: str | None,
    ) -> int:
        """Write the outcome of a moderation review and return the row count."""
        result = self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(
                status=status,
                reviewed_by=reviewer_id,
                reviewed_at=reviewed_at,
                rejection_reason=rejection_reason,
            )
        )
        return result.rowcount or 0

    def count_by_status(self) -> dict[PostStatus, int]:
        """Return the number of posts in each moderation status."""
        counts = {status: 0 for status in PostStatus}
        rows = self.session.execute(
            select(Post.status, func.count()).group_by(Post.status)
        )
        for status, total in rows:
            counts[PostStatus(status)] = int(total)
        return counts
