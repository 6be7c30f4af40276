"""Data access helpers for likes, follows and comments."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from petboard.models import Comment, Follow, Post, PostLike, User

__all__ = ["InteractionRepository"]


class InteractionRepository:
    """Row-level access to the association tables owned by the interaction ledger."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # Likes

    def find_like(self, user_id: int, post_id: int, *, lock: bool = False) -> PostLike | None:
        """Return the like row for the pair, optionally locking it for update."""
        stmt = select(PostLike).where(
            PostLike.user_id == user_id,
            PostLike.post_id == post_id,
        )
        if lock:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalars().first()

    def add_like(self, user_id: int, post_id: int) -> PostLike:
        """Insert a like inside a savepoint so a duplicate only undoes this insert."""
        like = PostLike(user_id=user_id, post_id=post_id)
        with self.session.begin_nested():
            self.session.add(like)
        return like

    def remove_like(self, user_id: int, post_id: int) -> int:
        """Delete the like for the pair; a concurrent removal just reports 0 rows."""
        stmt = delete(PostLike).where(
            PostLike.user_id == user_id,
            PostLike.post_id == post_id,
        )
        return self.session.execute(stmt).rowcount or 0

    def count_likes(self, post_id: int) -> int:
        stmt = select(func.count()).select_from(PostLike).where(PostLike.post_id == post_id)
        return int(self.session.execute(stmt).scalar_one())

    # Follows

    def find_follow(
        self,
        follower_id: int,
        following_id: int,
        *,
        lock: bool = False,
    ) -> Follow | None:
        """Return the follow edge for the pair, optionally locking it for update."""
        stmt = select(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
        if lock:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalars().first()

    def add_follow(self, follower_id: int, following_id: int) -> Follow:
        """Insert a follow edge inside a savepoint."""
        edge = Follow(follower_id=follower_id, following_id=following_id)
        with self.session.begin_nested():
            self.session.add(edge)
        return edge

    def remove_follow(self, follower_id: int, following_id: int) -> int:
        stmt = delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
        return self.session.execute(stmt).rowcount or 0

    def followers(self, user_id: int) -> list[tuple[int, str, datetime]]:
        """Return ``(id, name, followed_at)`` for users following ``user_id``."""
        stmt = (
            select(User.id, User.name, Follow.created_at)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.following_id == user_id)
            .order_by(Follow.created_at.desc(), User.id.desc())
        )
        return [tuple(row) for row in self.session.execute(stmt)]

    def following(self, user_id: int) -> list[tuple[int, str, datetime]]:
        """Return ``(id, name, followed_at)`` for users ``user_id`` follows."""
        stmt = (
            select(User.id, User.name, Follow.created_at)
            .join(Follow, Follow.following_id == User.id)
            .where(Follow.follower_id == user_id)
            .order_by(Follow.created_at.desc(), User.id.desc())
        )
        return [tuple(row) for row in self.session.execute(stmt)]

    def count_followers(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
        return int(self.session.execute(stmt).scalar_one())

    def count_following(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
        return int(self.session.execute(stmt).scalar_one())

    # Comments

    def create_comment(self, user_id: int, post_id: int, content: str) -> Comment:
        comment = Comment(user_id=user_id, post_id=post_id, content=content)
        self.session.add(comment)
        self.session.flush()
        return comment

    def get_comment(self, comment_id: int) -> Comment | None:
        return self.session.get(Comment, comment_id)

    def delete_comment(self, comment_id: int) -> int:
        """Delete one comment by id and return the row count."""
        return self.session.execute(delete(Comment).where(Comment.id == comment_id)).rowcount or 0

    def all_comments(self) -> list[tuple[Comment, str, str]]:
        """Return ``(comment, author_name, post_title)`` for every comment, newest first."""
        stmt = (
            select(Comment, User.name, Post.title)
            .join(User, User.id == Comment.user_id)
            .join(Post, Post.id == Comment.post_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return [(comment, name, title) for comment, name, title in self.session.execute(stmt)]

    def comments_for_post(self, post_id: int) -> list[tuple[Comment, str]]:
        """Return comments with their author names, oldest first."""
        stmt = (
            select(Comment, User.name)
            .join(User, User.id == Comment.user_id)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return [(comment, name) for comment, name in self.session.execute(stmt)]

    def user_exists(self, user_id: int) -> bool:
        return self.session.execute(select(User.id).where(User.id == user_id)).first() is not None

    def user_name(self, user_id: int) -> str | None:
        return self.session.execute(select(User.name).where(User.id == user_id)).scalar()

    # Totals

    def total_users(self) -> int:
        return int(self.session.execute(select(func.count()).select_from(User)).scalar_one())

    def total_likes(self) -> int:
        return int(self.session.execute(select(func.count()).select_from(PostLike)).scalar_one())

    def total_comments(self) -> int:
        return int(self.session.execute(select(func.count()).select_from(Comment)).scalar_one())
