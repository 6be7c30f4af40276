# src/petboard/services/moderation.py
"""Moderation workflow for posts.

The state machine has three states and no configurable transitions::

    (create) -> pending
    pending --approve--> approved
    pending --reject(reason)--> rejected

Approve and reject do not check the current status: re-reviewing a post is
allowed and only refreshes the reviewer and timestamp.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from sqlalchemy.orm import Session

from petboard.core.errors import NotFound, Unauthorized, ValidationError
from petboard.core.security import Identity
from petboard.db.session import atomic
from petboard.db.time import utcnow
from petboard.models.post import PostStatus
from petboard.repositories.interaction_repo import InteractionRepository
from petboard.repositories.post_repo import PostRepository
from petboard.schemas.moderation import ContentStats
from petboard.schemas.post import PostView
from petboard.services import events
from petboard.services.feed import FeedQueryEngine
from petboard.services.validators import parse_status

logger = logging.getLogger(__name__)


class Owned(Protocol):
    """Anything exposing the id of the user who owns it."""

    author_id: int


def can_update(post: Owned, identity: Identity) -> bool:
    """Return True when ``identity`` may edit ``post`` (owner or admin)."""
    return identity.is_admin or post.author_id == identity.user_id


def can_delete(post: Owned, identity: Identity) -> bool:
    """Return True when ``identity`` may delete ``post`` (owner or admin)."""
    return identity.is_admin or post.author_id == identity.user_id


def visible_to(view: PostView, identity: Identity | None) -> PostView:
    """Return ``view`` with review metadata hidden unless the caller is the owner or an admin."""
    if identity is not None and can_update(view, identity):
        return view
    return view.redacted()


def ensure_can_modify(post: Owned, identity: Identity, action: str = "update") -> None:
    """Raise :class:`Unauthorized` unless ``identity`` may perform ``action`` on ``post``.

    Args:
        post: Post (ORM row or read model) being mutated.
        identity: Verified caller identity.
        action: Either ``"update"`` or ``"delete"``.

    Raises:
        Unauthorized: If the caller is neither the owner nor an admin.
    """
    check = can_delete if action == "delete" else can_update
    if not check(post, identity):
        raise Unauthorized(f"You can only {action} your own posts")


class ModerationWorkflow:
    """Service handling moderation state transitions."""

    def __init__(
        self,
        session: Session,
        *,
        feed: FeedQueryEngine | None = None,
        bus: events.EventBus | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session = session
        self.repo = PostRepository(session)
        self.feed = feed or FeedQueryEngine(session)
        self.bus = bus or events.EventBus()
        self.clock = clock

    def approve(self, post_id: int, reviewer_id: int) -> PostView:
        """Approve a post and record who reviewed it.

        Args:
            post_id: Post to approve.
            reviewer_id: Moderator performing the review.

        Returns:
            The approved post.

        Raises:
            NotFound: If the post does not exist.
        """
        with atomic(self.session):
            updated = self.repo.record_review(
                post_id,
                status=PostStatus.APPROVED,
                reviewer_id=reviewer_id,
                reviewed_at=self.clock(),
                rejection_reason=None,
            )
            if not updated:
                raise NotFound("Post not found")

        logger.info("Post %s approved by %s", post_id, reviewer_id)
        self.bus.publish(events.POST_APPROVED, post_id=post_id, reviewer_id=reviewer_id)
        return self.feed.by_id(post_id)

    def reject(self, post_id: int, reviewer_id: int, reason: str | None) -> PostView:
        """Reject a post with a mandatory reason.

        Args:
            post_id: Post to reject.
            reviewer_id: Moderator performing the review.
            reason: Explanation shown to the author; must not be blank.

        Returns:
            The rejected post.

        Raises:
            ValidationError: If ``reason`` is blank (checked before touching storage).
            NotFound: If the post does not exist.
        """
        if reason is None or not reason.strip():
            raise ValidationError("rejection reason is required")
        reason = reason.strip()

        with atomic(self.session):
            updated = self.repo.record_review(
                post_id,
                status=PostStatus.REJECTED,
                reviewer_id=reviewer_id,
                reviewed_at=self.clock(),
                rejection_reason=reason,
            )
            if not updated:
                raise NotFound("Post not found")

        logger.info("Post %s rejected by %s", post_id, reviewer_id)
        self.bus.publish(
            events.POST_REJECTED,
            post_id=post_id,
            reviewer_id=reviewer_id,
            reason=reason,
        )
        return self.feed.by_id(post_id)

    def list_by_status(self, status: PostStatus | str) -> list[PostView]:
        """Return posts in ``status``; unknown statuses fail before any query."""
        return self.feed.by_status(parse_status(status))

    def list_pending(self) -> list[PostView]:
        return self.feed.pending()

    def stats(self) -> ContentStats:
        """Return store-wide totals for the moderation dashboard."""
        by_status = self.repo.count_by_status()
        interactions = InteractionRepository(self.session)
        return ContentStats(
            total_users=interactions.total_users(),
            total_posts=sum(by_status.values()),
            total_comments=interactions.total_comments(),
            total_likes=interactions.total_likes(),
            posts_by_status={status.value: total for status, total in by_status.items()},
        )
