"""Post-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from petboard.models.post import Category, PostStatus


class TagView(BaseModel):
    """Tag as shown next to a post."""

    name: str
    color: str

    model_config = ConfigDict(from_attributes=True)


class PostCreate(BaseModel):
    """Schema for creating a new post.

    Field rules live in the post store so every violation maps to the same
    validation error.
    """

    title: str = Field(..., description="Post title")
    content: str = Field(..., description="Post body")
    category: str = Field(..., description="One of the fixed categories")
    image_url: str | None = Field(None, description="Optional image reference")
    tags: list[str] = Field(default_factory=list, description="Free-form tag names")


class PostUpdate(BaseModel):
    """Schema for updating a post; omitted fields keep their current value."""

    title: str | None = None
    content: str | None = None
    category: str | None = None
    image_url: str | None = None
    tags: list[str] | None = Field(
        None,
        description="When present, replaces every tag on the post (an empty list clears them)",
    )


class FeaturedUpdate(BaseModel):
    """Schema for toggling the featured flag."""

    is_featured: bool


class PostView(BaseModel):
    """Canonical read model for a post.

    Every derived field is always present: counts default to zero, tags to an
    empty list and ``is_liked_by_me`` to ``False`` when no viewer is known.
    """

    id: int
    author_id: int
    author_name: str
    title: str
    content: str
    category: Category
    image_url: str | None = None
    status: PostStatus
    reviewed_by: int | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None
    is_featured: bool = False
    featured_at: datetime | None = None
    created_at: datetime
    tags: list[TagView] = Field(default_factory=list)
    likes_count: int = 0
    comments_count: int = 0
    is_liked_by_me: bool = False

    def redacted(self) -> PostView:
        """Return a copy without moderation-only metadata."""
        return self.model_copy(
            update={"reviewed_by": None, "reviewed_at": None, "rejection_reason": None}
        )
