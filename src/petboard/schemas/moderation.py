"""Moderation-related Pydantic schemas."""

from pydantic import BaseModel, Field


class RejectRequest(BaseModel):
    """Schema for rejecting a post."""

    # Blank reasons are rejected by the workflow with a 400, not a 422.
    reason: str = Field("", description="Why the post was rejected")


class ContentStats(BaseModel):
    """Aggregate totals shown on the moderation dashboard."""

    total_users: int
    total_posts: int
    total_comments: int
    total_likes: int
    posts_by_status: dict[str, int]
