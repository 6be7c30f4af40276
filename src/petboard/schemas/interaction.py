"""Schemas for likes, follows and comments."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class LikeToggle(BaseModel):
    """Outcome of a like toggle."""

    liked: bool
    likes_count: int


class LikesCount(BaseModel):
    """Current number of likes on a post."""

    count: int


class FollowToggle(BaseModel):
    """Outcome of a follow toggle."""

    following: bool


class CommentCreate(BaseModel):
    """Schema for adding a comment."""

    content: str = Field(..., description="Comment text")


class CommentAuthor(BaseModel):
    """Author summary attached to a comment."""

    id: int
    name: str


class CommentView(BaseModel):
    """Comment returned by the API."""

    id: int
    post_id: int
    content: str
    created_at: datetime
    author: CommentAuthor


class FollowUser(BaseModel):
    """User on either end of a follow edge."""

    id: int
    name: str
    followed_at: datetime


class FollowCounts(BaseModel):
    """Follower and following totals for a user."""

    followers_count: int
    following_count: int


class ModeratedComment(CommentView):
    """Comment as listed to moderators, with the post it belongs to."""

    post_title: str


class UserProfile(BaseModel):
    """Public profile summary of a user."""

    id: int
    name: str
    followers_count: int
    following_count: int
    is_following: bool = False
