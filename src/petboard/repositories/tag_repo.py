"""Data access helpers for tags and the post/tag association."""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from petboard.models.tag import PostTag, Tag

__all__ = ["TagRepository"]


class TagRepository:
    """Thin wrapper around database access for tag entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_name(self, name: str) -> Tag | None:
        """Return the tag stored under an already-normalized name."""
        return self.session.execute(select(Tag).where(Tag.name == name)).scalars().first()

    def get_or_create(self, name: str, color_factory: Callable[[], str]) -> Tag:
        """Return the tag named ``name``, creating it on first use.

        ``color_factory`` is only called when the tag does not exist yet, so an
        existing tag never changes color.
        """
        tag = self.get_by_name(name)
        if tag is not None:
            return tag

        try:
            with self.session.begin_nested():
                tag = Tag(name=name, color=color_factory())
                self.session.add(tag)
        except IntegrityError:
            # Another transaction created the same name first.
            tag = self.get_by_name(name)
            if tag is None:
                raise
        return tag

    def replace_post_tags(self, post_id: int, tag_ids: Sequence[int]) -> None:
        """Delete every association for ``post_id`` and insert ``tag_ids``."""
        existing = self.session.execute(
            select(PostTag).where(PostTag.post_id == post_id)
        ).scalars()
        for link in existing:
            self.session.delete(link)
        self.session.flush()

        for tag_id in tag_ids:
            self.session.add(PostTag(post_id=post_id, tag_id=tag_id))
        self.session.flush()

    def tags_for_posts(self, post_ids: Iterable[int]) -> dict[int, list[Tag]]:
        """Return the tags of each post, ordered by tag name."""
        ids = list(post_ids)
        grouped: dict[int, list[Tag]] = defaultdict(list)
        if not ids:
            return grouped

        rows = self.session.execute(
            select(PostTag.post_id, Tag)
            .join(Tag, Tag.id == PostTag.tag_id)
            .where(PostTag.post_id.in_(ids))
            .order_by(PostTag.post_id, Tag.name)
        )
        for post_id, tag in rows:
            grouped[post_id].append(tag)
        return grouped

    def top_tags(self, limit: int) -> list[tuple[str, str, int]]:
        """Return ``(name, color, post_count)`` for the most used tags.

        Ties on the count are broken by tag id so repeated calls agree.
        """
        post_count = func.count(PostTag.post_id).label("post_count")
        stmt = (
            select(Tag.name, Tag.color, post_count)
            .join(PostTag, PostTag.tag_id == Tag.id)
            .group_by(Tag.id, Tag.name, Tag.color)
            .order_by(post_count.desc(), Tag.id.asc())
            .limit(limit)
        )
        return [(name, color, int(count)) for name, color, count in self.session.execute(stmt)]
