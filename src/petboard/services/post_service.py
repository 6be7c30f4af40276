"""Service-level helpers for creating and mutating posts."""
from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from petboard.core.errors import NotFound
from petboard.core.settings import settings
from petboard.db.session import atomic
from petboard.db.time import utcnow
from petboard.models.post import Category, PostStatus
from petboard.repositories.interaction_repo import InteractionRepository
from petboard.repositories.post_repo import PostRepository
from petboard.schemas.post import PostUpdate, PostView
from petboard.services import events
from petboard.services.feed import FeedQueryEngine
from petboard.services.tags import TagRegistry
from petboard.services.validators import clean_image_url, parse_category, require_text

logger = logging.getLogger(__name__)


class PostStore:
    """Owns post rows, their moderation fields and the featured singleton.

    Ownership is not checked here; the HTTP layer asks
    :mod:`petboard.services.moderation` before calling a mutation.
    """

    def __init__(
        self,
        session: Session,
        *,
        tags: TagRegistry | None = None,
        feed: FeedQueryEngine | None = None,
        bus: events.EventBus | None = None,
    ) -> None:
        self.session = session
        self.repo = PostRepository(session)
        self.tags = tags or TagRegistry(session)
        self.feed = feed or FeedQueryEngine(session, self.tags)
        self.bus = bus or events.EventBus()

    def create(
        self,
        *,
        author_id: int,
        title: str,
        content: str,
        category: Category | str,
        image_url: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> PostView:
        """Create a pending post and attach its tags in one transaction.

        Args:
            author_id: Owning user.
            title: Non-empty title, at most ``TITLE_MAX_LENGTH`` characters.
            content: Non-empty body.
            category: Member of the closed category set.
            image_url: Optional image reference; blank means none.
            tags: Tag names; absent or empty leaves the post untagged.

        Returns:
            The created post. Its status is always ``pending``.

        Raises:
            ValidationError: If title, content or category are invalid.
            NotFound: If the author does not exist.
        """
        clean_title = require_text(title, "title", max_length=settings.title_max_length)
        require_text(content, "content")
        parsed_category = parse_category(category)
        tag_names = list(tags or [])

        with atomic(self.session):
            if not InteractionRepository(self.session).user_exists(author_id):
                raise NotFound("User not found")
            post = self.repo.create(
                author_id=author_id,
                title=clean_title,
                content=content,
                category=parsed_category,
                image_url=clean_image_url(image_url),
            )
            self.tags.attach(post.id, tag_names)
            post_id = post.id

        self.bus.publish(events.POST_CREATED, post_id=post_id, author_id=author_id)
        return self.feed.by_id(post_id)

    def update(self, post_id: int, changes: PostUpdate) -> PostView:
        """Replace the supplied fields of a post.

        Only fields explicitly set on ``changes`` are touched. A supplied tag
        list, even an empty one, replaces every tag on the post. The
        moderation status is never reset.

        Raises:
            ValidationError: If a supplied field is invalid.
            NotFound: If the post does not exist.
        """
        supplied = changes.model_dump(exclude_unset=True)
        values: dict[str, object] = {}
        if "title" in supplied:
            values["title"] = require_text(
                supplied["title"], "title", max_length=settings.title_max_length
            )
        if "content" in supplied:
            require_text(supplied["content"], "content")
            values["content"] = supplied["content"]
        if "category" in supplied:
            values["category"] = parse_category(supplied["category"])
        if "image_url" in supplied:
            values["image_url"] = clean_image_url(supplied["image_url"])
        new_tags = supplied.get("tags")

        with atomic(self.session):
            post = self.repo.get_by_id(post_id)
            if post is None:
                raise NotFound("Post not found")
            self.repo.apply_changes(post, values)
            if new_tags is not None:
                self.tags.attach(post_id, new_tags)

        self.bus.publish(events.POST_UPDATED, post_id=post_id, fields=sorted(supplied))
        return self.feed.by_id(post_id)

    def delete(self, post_id: int) -> None:
        """Delete a post together with its tags, likes and comments.

        Raises:
            NotFound: If the post does not exist.
        """
        with atomic(self.session):
            post = self.repo.get_by_id(post_id)
            if post is None:
                raise NotFound("Post not found")
            author_id = post.author_id
            self.repo.delete(post)

        self.bus.publish(events.POST_DELETED, post_id=post_id, author_id=author_id)

    def set_featured(self, post_id: int, is_featured: bool) -> PostView:
        """Feature or un-feature a post.

        Featuring clears whichever post currently holds the flag and stamps
        ``featured_at`` on ``post_id`` inside one transaction, so no reader
        ever sees two featured posts.

        Raises:
            NotFound: If the post does not exist.
        """
        with atomic(self.session):
            if not self.repo.exists(post_id):
                raise NotFound("Post not found")
            if is_featured:
                cleared = self.repo.clear_featured()
                self.repo.set_featured_flag(post_id, utcnow())
                logger.debug("Featured post %s (cleared %d)", post_id, cleared)
            else:
                self.repo.set_featured_flag(post_id, None)

        self.bus.publish(events.POST_FEATURED, post_id=post_id, is_featured=is_featured)
        return self.feed.by_id(post_id)

    # Reads delegate to the feed engine so every path shares one assembly.

    def by_id(self, post_id: int, viewer_id: int | None = None) -> PostView:
        return self.feed.by_id(post_id, viewer_id)

    def by_author(self, author_id: int, viewer_id: int | None = None) -> list[PostView]:
        return self.feed.by_author(author_id, viewer_id)

    def by_status(self, status: PostStatus | str) -> list[PostView]:
        return self.feed.by_status(status)

    def pending(self) -> list[PostView]:
        return self.feed.pending()
