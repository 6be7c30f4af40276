"""Tag vocabulary and post/tag association."""
from __future__ import annotations

import logging
import random
import unicodedata
from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from petboard.core.errors import ValidationError
from petboard.core.settings import settings
from petboard.models.tag import Tag
from petboard.repositories.tag_repo import TagRepository
from petboard.schemas.tag import TopTag

logger = logging.getLogger(__name__)

TAG_NAME_MAX_LENGTH = 64


def normalize_tag_name(name: str) -> str:
    """Return the canonical form used for tag uniqueness.

    Accents are folded, case is folded, and surrounding or repeated
    whitespace is collapsed, so ``" Saúde "`` and ``"SAUDE"`` both become
    ``"saude"``.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    without_marks = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(without_marks.casefold().split())


def normalize_tag_names(names: Iterable[str]) -> list[str]:
    """Normalize names, dropping blanks and collapsing duplicates in first-seen order."""
    seen: dict[str, None] = {}
    for raw in names:
        normalized = normalize_tag_name(raw)
        if not normalized:
            continue
        if len(normalized) > TAG_NAME_MAX_LENGTH:
            raise ValidationError(
                f"tag names are limited to {TAG_NAME_MAX_LENGTH} characters"
            )
        seen.setdefault(normalized, None)
    return list(seen)


class TagRegistry:
    """Owns tag rows and the post/tag association.

    The registry joins the caller's unit of work: it flushes but never
    commits, so the post store can attach tags in the same transaction that
    writes the post.
    """

    def __init__(
        self,
        session: Session,
        *,
        rng: random.Random | None = None,
        palette: Sequence[str] | None = None,
    ) -> None:
        self.session = session
        self.repo = TagRepository(session)
        self.rng = rng or random.Random()
        self.palette = list(settings.tag_palette if palette is None else palette)
        if not self.palette:
            raise ValueError("Tag palette must contain at least one color")

    def _pick_color(self) -> str:
        return self.rng.choice(self.palette)

    def attach(self, post_id: int, names: Iterable[str] | None) -> list[Tag]:
        """Replace every tag on ``post_id`` with ``names``.

        Args:
            post_id: Post whose associations are replaced.
            names: Raw tag names; ``None`` or an empty list leaves the post untagged.

        Returns:
            The tags now attached to the post, in first-seen order.

        Raises:
            ValidationError: If a normalized name exceeds the length limit.
        """
        normalized = normalize_tag_names(names or [])
        tags = [self.repo.get_or_create(name, self._pick_color) for name in normalized]
        self.repo.replace_post_tags(post_id, [tag.id for tag in tags])
        logger.debug("Attached %d tag(s) to post %s", len(tags), post_id)
        return tags

    def tags_for_posts(self, post_ids: Iterable[int]) -> dict[int, list[Tag]]:
        return self.repo.tags_for_posts(post_ids)

    def top_tags(self, limit: int) -> list[TopTag]:
        """Return the most used tags, highest post count first."""
        if limit < 0:
            raise ValidationError("limit must be a non-negative integer")
        if limit == 0:
            return []
        return [
            TopTag(name=name, color=color, post_count=count)
            for name, color, count in self.repo.top_tags(limit)
        ]
