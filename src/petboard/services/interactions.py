"""Likes, follow edges and comments.

Toggles are serialized per pair: the existing row is read with
``SELECT ... FOR UPDATE`` and inserts run inside a savepoint, so a duplicate
insert from a concurrent request is caught, re-read and reported as the
state the store converged to. If the transaction still fails it is retried
once before :class:`~petboard.core.errors.ConflictError` reaches the caller.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from petboard.core.errors import ConflictError, NotFound, ValidationError
from petboard.core.settings import settings
from petboard.db.session import atomic
from petboard.repositories.interaction_repo import InteractionRepository
from petboard.repositories.post_repo import PostRepository
from petboard.schemas.interaction import (
    CommentAuthor,
    CommentView,
    FollowCounts,
    FollowToggle,
    FollowUser,
    LikeToggle,
    ModeratedComment,
    UserProfile,
)
from petboard.services import events

logger = logging.getLogger(__name__)

T = TypeVar("T")

TOGGLE_ATTEMPTS = 2


class InteractionLedger:
    """Owns like, follow and comment rows."""

    def __init__(self, session: Session, *, bus: events.EventBus | None = None) -> None:
        self.session = session
        self.repo = InteractionRepository(session)
        self.posts = PostRepository(session)
        self.bus = bus or events.EventBus()

    def _retrying(self, label: str, unit_of_work: Callable[[], T]) -> T:
        for attempt in range(1, TOGGLE_ATTEMPTS + 1):
            try:
                with atomic(self.session):
                    return unit_of_work()
            except IntegrityError as err:
                if attempt == TOGGLE_ATTEMPTS:
                    logger.warning("%s failed after %d attempts", label, attempt)
                    raise ConflictError(f"Concurrent update on {label}, please retry") from err
                logger.info("%s hit a concurrent write, retrying", label)
        raise AssertionError("unreachable")

    @staticmethod
    def _flip(
        find: Callable[..., Any],
        add: Callable[[], Any],
        remove: Callable[[], int],
    ) -> bool:
        """Flip one association row and return whether it is now present."""
        if find(lock=True) is not None:
            remove()
            return False
        try:
            add()
        except IntegrityError:
            # Another request inserted the same pair first.
            if find() is None:
                raise
            logger.debug("Duplicate insert converged on existing row")
        return True

    # Likes

    def toggle_like(self, user_id: int, post_id: int) -> LikeToggle:
        """Like the post if the user has not, otherwise remove the like.

        Raises:
            NotFound: If the post or the user does not exist.
            ConflictError: If a concurrent write could not be reconciled.
        """

        def unit_of_work() -> LikeToggle:
            if not self.posts.exists(post_id):
                raise NotFound("Post not found")
            if not self.repo.user_exists(user_id):
                raise NotFound("User not found")
            liked = self._flip(
                lambda lock=False: self.repo.find_like(user_id, post_id, lock=lock),
                lambda: self.repo.add_like(user_id, post_id),
                lambda: self.repo.remove_like(user_id, post_id),
            )
            return LikeToggle(liked=liked, likes_count=self.repo.count_likes(post_id))

        result = self._retrying(f"like {user_id}/{post_id}", unit_of_work)
        self.bus.publish(
            events.LIKE_TOGGLED, user_id=user_id, post_id=post_id, liked=result.liked
        )
        return result

    def likes_count(self, post_id: int) -> int:
        """Return the number of likes on ``post_id``.

        Raises:
            NotFound: If the post does not exist.
        """
        if not self.posts.exists(post_id):
            raise NotFound("Post not found")
        return self.repo.count_likes(post_id)

    def has_liked(self, user_id: int, post_id: int) -> bool:
        return self.repo.find_like(user_id, post_id) is not None

    # Follows

    def toggle_follow(self, follower_id: int, following_id: int) -> FollowToggle:
        """Follow ``following_id`` or drop the existing edge.

        Raises:
            ValidationError: If a user tries to follow themselves. Nothing is
                read or written in that case.
            NotFound: If either user does not exist.
            ConflictError: If a concurrent write could not be reconciled.
        """
        if follower_id == following_id:
            raise ValidationError("You cannot follow yourself")

        def unit_of_work() -> FollowToggle:
            if not self.repo.user_exists(following_id) or not self.repo.user_exists(follower_id):
                raise NotFound("User not found")
            following = self._flip(
                lambda lock=False: self.repo.find_follow(follower_id, following_id, lock=lock),
                lambda: self.repo.add_follow(follower_id, following_id),
                lambda: self.repo.remove_follow(follower_id, following_id),
            )
            return FollowToggle(following=following)

        result = self._retrying(f"follow {follower_id}/{following_id}", unit_of_work)
        self.bus.publish(
            events.FOLLOW_TOGGLED,
            follower_id=follower_id,
            following_id=following_id,
            following=result.following,
        )
        return result

    def is_following(self, follower_id: int, following_id: int) -> bool:
        return self.repo.find_follow(follower_id, following_id) is not None

    def profile(self, user_id: int, viewer_id: int | None = None) -> UserProfile:
        """Return the public profile of ``user_id`` as seen by ``viewer_id``.

        Raises:
            NotFound: If the user does not exist.
        """
        name = self.repo.user_name(user_id)
        if name is None:
            raise NotFound("User not found")
        return UserProfile(
            id=user_id,
            name=name,
            followers_count=self.repo.count_followers(user_id),
            following_count=self.repo.count_following(user_id),
            is_following=viewer_id is not None and self.is_following(viewer_id, user_id),
        )

    def followers(self, user_id: int) -> list[FollowUser]:
        """Return users following ``user_id``, most recent edge first."""
        self.require_user(user_id)
        return [
            FollowUser(id=uid, name=name, followed_at=followed_at)
            for uid, name, followed_at in self.repo.followers(user_id)
        ]

    def following(self, user_id: int) -> list[FollowUser]:
        """Return users ``user_id`` follows, most recent edge first."""
        self.require_user(user_id)
        return [
            FollowUser(id=uid, name=name, followed_at=followed_at)
            for uid, name, followed_at in self.repo.following(user_id)
        ]

    def follow_counts(self, user_id: int) -> FollowCounts:
        self.require_user(user_id)
        return FollowCounts(
            followers_count=self.repo.count_followers(user_id),
            following_count=self.repo.count_following(user_id),
        )

    # Comments

    def add_comment(self, user_id: int, post_id: int, content: str | None) -> CommentView:
        """Store a comment verbatim and return it with its author's name.

        Args:
            user_id: Commenting user.
            post_id: Post being commented on.
            content: Comment text; must contain something besides whitespace
                and be at most ``COMMENT_MAX_LENGTH`` characters.

        Raises:
            ValidationError: If the content is blank or too long.
            NotFound: If the post or the user does not exist.
        """
        if content is None or not content.strip():
            raise ValidationError("comment content is required")
        max_length = settings.comment_max_length
        if len(content) > max_length:
            raise ValidationError(f"comment must be at most {max_length} characters")

        with atomic(self.session):
            if not self.posts.exists(post_id):
                raise NotFound("Post not found")
            author_name = self.repo.user_name(user_id)
            if author_name is None:
                raise NotFound("User not found")
            comment = self.repo.create_comment(user_id, post_id, content)
            view = CommentView(
                id=comment.id,
                post_id=post_id,
                content=comment.content,
                created_at=comment.created_at,
                author=CommentAuthor(id=user_id, name=author_name),
            )

        self.bus.publish(
            events.COMMENT_ADDED, comment_id=view.id, post_id=post_id, user_id=user_id
        )
        return view

    def comments_for_post(self, post_id: int) -> list[CommentView]:
        """Return the comments on ``post_id`` oldest first.

        Raises:
            NotFound: If the post does not exist.
        """
        if not self.posts.exists(post_id):
            raise NotFound("Post not found")
        return [
            CommentView(
                id=comment.id,
                post_id=comment.post_id,
                content=comment.content,
                created_at=comment.created_at,
                author=CommentAuthor(id=comment.user_id, name=name),
            )
            for comment, name in self.repo.comments_for_post(post_id)
        ]

    def delete_comment(self, comment_id: int, *, deleted_by: int | None = None) -> None:
        """Remove a comment.

        Raises:
            NotFound: If the comment does not exist.
        """
        with atomic(self.session):
            comment = self.repo.get_comment(comment_id)
            if comment is None:
                raise NotFound("Comment not found")
            author_id, post_id = comment.user_id, comment.post_id
            self.repo.delete_comment(comment_id)

        self.bus.publish(
            events.COMMENT_DELETED,
            comment_id=comment_id,
            post_id=post_id,
            author_id=author_id,
            deleted_by=deleted_by,
        )

    def all_comments(self) -> list[ModeratedComment]:
        """Return every comment with its post title, newest first."""
        return [
            ModeratedComment(
                id=comment.id,
                post_id=comment.post_id,
                post_title=title,
                content=comment.content,
                created_at=comment.created_at,
                author=CommentAuthor(id=comment.user_id, name=name),
            )
            for comment, name, title in self.repo.all_comments()
        ]

    def require_user(self, user_id: int) -> None:
        """Raise :class:`NotFound` unless ``user_id`` exists."""
        if not self.repo.user_exists(user_id):
            raise NotFound("User not found")
