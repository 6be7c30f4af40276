"""Read models for posts.

Every listing in the application goes through :class:`FeedQueryEngine`, so
counts, tags and the viewer's like state are always assembled the same way
and every caller receives the same :class:`~petboard.schemas.post.PostView`
shape. Counts are computed from the association rows at read time; there are
no denormalized counters to keep in sync.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import Boolean, Select, func, literal, or_, select
from sqlalchemy.orm import Session

from petboard.core.errors import NotFound
from petboard.models import Comment, Post, PostLike, PostStatus, PostTag, Tag, User
from petboard.models.post import Category
from petboard.schemas.post import PostView, TagView
from petboard.services.tags import TagRegistry, normalize_tag_name
from petboard.services.validators import check_page, parse_category, parse_status

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 20


def _likes_count():
    return (
        select(func.count())
        .select_from(PostLike)
        .where(PostLike.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )


def _comments_count():
    return (
        select(func.count())
        .select_from(Comment)
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )


def _liked_by(viewer_id: int | None):
    if viewer_id is None:
        return literal(False, Boolean)
    return (
        select(PostLike.user_id)
        .where(PostLike.post_id == Post.id, PostLike.user_id == viewer_id)
        .correlate(Post)
        .exists()
    )


def _newest_first(stmt: Select) -> Select:
    return stmt.order_by(Post.created_at.desc(), Post.id.desc())


class FeedQueryEngine:
    """Assemble post read models without mutating state."""

    def __init__(self, session: Session, tags: TagRegistry | None = None) -> None:
        self.session = session
        self.tags = tags or TagRegistry(session)

    def _select(self, viewer_id: int | None) -> Select:
        return select(
            Post,
            User.name.label("author_name"),
            _likes_count().label("likes_count"),
            _comments_count().label("comments_count"),
            _liked_by(viewer_id).label("is_liked_by_me"),
        ).join(User, User.id == Post.author_id)

    def _run(self, stmt: Select) -> list[PostView]:
        rows = self.session.execute(stmt).all()
        tags_by_post = self.tags.tags_for_posts(row[0].id for row in rows)
        return [
            self._to_view(post, author_name, likes, comments, liked, tags_by_post.get(post.id, []))
            for post, author_name, likes, comments, liked in rows
        ]

    @staticmethod
    def _to_view(
        post: Post,
        author_name: str,
        likes: int | None,
        comments: int | None,
        liked: bool | None,
        tags: Sequence[Tag],
    ) -> PostView:
        return PostView(
            id=post.id,
            author_id=post.author_id,
            author_name=author_name,
            title=post.title,
            content=post.content,
            category=post.category,
            image_url=post.image_url,
            status=post.status,
            reviewed_by=post.reviewed_by,
            reviewed_at=post.reviewed_at,
            rejection_reason=post.rejection_reason,
            is_featured=bool(post.is_featured),
            featured_at=post.featured_at,
            created_at=post.created_at,
            tags=[TagView(name=tag.name, color=tag.color) for tag in tags],
            likes_count=int(likes or 0),
            comments_count=int(comments or 0),
            is_liked_by_me=bool(liked),
        )

    def list_posts(
        self,
        *,
        category: Category | str | None = None,
        tag: str | None = None,
        status: PostStatus | str = PostStatus.APPROVED,
        limit: int | None = None,
        offset: int | None = None,
        viewer_id: int | None = None,
    ) -> list[PostView]:
        """Return a filtered, paginated listing, newest first.

        Args:
            category: Restrict to one category.
            tag: Restrict to posts carrying this tag (normalized before matching).
            status: Moderation status to list; approved unless the caller is
                authorized for something else.
            limit: Maximum number of posts; ``None`` is unbounded and ``0`` returns nothing.
            offset: Number of posts to skip; ``None`` means none.
            viewer_id: Viewer whose like state is reported.

        Raises:
            ValidationError: On an unknown category/status or negative pagination.
        """
        check_page(limit, offset)
        status = parse_status(status)
        stmt = self._select(viewer_id).where(Post.status == status)

        if category is not None:
            stmt = stmt.where(Post.category == parse_category(category))

        tag_name = normalize_tag_name(tag) if tag is not None else ""
        if tag_name:
            stmt = stmt.where(
                select(PostTag.post_id)
                .join(Tag, Tag.id == PostTag.tag_id)
                .where(PostTag.post_id == Post.id, Tag.name == tag_name)
                .correlate(Post)
                .exists()
            )

        if limit == 0:
            return []

        stmt = _newest_first(stmt)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        return self._run(stmt)

    def by_id(self, post_id: int, viewer_id: int | None = None) -> PostView:
        """Return one post with every derived field.

        Raises:
            NotFound: If the post does not exist.
        """
        views = self._run(self._select(viewer_id).where(Post.id == post_id))
        if not views:
            raise NotFound("Post not found")
        return views[0]

    def by_author(
        self,
        author_id: int,
        viewer_id: int | None = None,
        status: PostStatus | str | None = None,
    ) -> list[PostView]:
        """Return posts written by ``author_id``, newest first.

        Every status is included unless ``status`` narrows it; public
        profiles pass ``approved``.
        """
        stmt = self._select(viewer_id).where(Post.author_id == author_id)
        if status is not None:
            stmt = stmt.where(Post.status == parse_status(status))
        return self._run(_newest_first(stmt))

    def by_status(self, status: PostStatus | str, viewer_id: int | None = None) -> list[PostView]:
        """Return all posts in one moderation status, newest first."""
        status = parse_status(status)
        return self._run(_newest_first(self._select(viewer_id).where(Post.status == status)))

    def pending(self, viewer_id: int | None = None) -> list[PostView]:
        return self.by_status(PostStatus.PENDING, viewer_id)

    def most_liked(self, limit: int, viewer_id: int | None = None) -> list[PostView]:
        """Return approved posts with at least one like, most liked first.

        Posts without likes never appear.
        """
        check_page(limit)
        if limit == 0:
            return []
        likes = _likes_count()
        stmt = (
            self._select(viewer_id)
            .where(Post.status == PostStatus.APPROVED, likes > 0)
            .order_by(likes.desc(), Post.created_at.desc(), Post.id.desc())
            .limit(limit)
        )
        return self._run(stmt)

    def featured(self, viewer_id: int | None = None) -> PostView | None:
        """Return the featured post, or ``None`` when nothing is featured."""
        stmt = (
            self._select(viewer_id)
            .where(Post.is_featured.is_(True))
            .order_by(Post.featured_at.desc(), Post.id.desc())
            .limit(1)
        )
        views = self._run(stmt)
        return views[0] if views else None

    def recent(self, limit: int, viewer_id: int | None = None) -> list[PostView]:
        """Return the newest approved posts, leaving out the featured one."""
        check_page(limit)
        if limit == 0:
            return []
        stmt = self._select(viewer_id).where(
            Post.status == PostStatus.APPROVED,
            Post.is_featured.is_(False),
        )
        return self._run(_newest_first(stmt).limit(limit))

    def search(
        self,
        term: str | None,
        viewer_id: int | None = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[PostView]:
        """Case-insensitive substring search over approved posts.

        Title, content and tag names are matched. A blank term yields an
        empty list rather than an error.
        """
        check_page(limit)
        term = (term or "").strip()
        if not term or limit == 0:
            return []

        matches = [
            Post.title.icontains(term, autoescape=True),
            Post.content.icontains(term, autoescape=True),
        ]
        tag_term = normalize_tag_name(term)
        if tag_term:
            matches.append(
                select(PostTag.post_id)
                .join(Tag, Tag.id == PostTag.tag_id)
                .where(
                    PostTag.post_id == Post.id,
                    Tag.name.contains(tag_term, autoescape=True),
                )
                .correlate(Post)
                .exists()
            )

        stmt = self._select(viewer_id).where(Post.status == PostStatus.APPROVED, or_(*matches))
        results = self._run(_newest_first(stmt).limit(limit))
        logger.debug("Search %r matched %d post(s)", term, len(results))
        return results
