"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .interaction import (
    CommentAuthor,
    CommentCreate,
    CommentView,
    FollowCounts,
    FollowToggle,
    FollowUser,
    LikesCount,
    LikeToggle,
    ModeratedComment,
    UserProfile,
)
from .moderation import ContentStats, RejectRequest
from .post import FeaturedUpdate, PostCreate, PostUpdate, PostView, TagView
from .tag import TopTag

__all__ = [
    "CommentAuthor", "CommentCreate", "CommentView",
    "FollowCounts", "FollowToggle", "FollowUser",
    "LikesCount", "LikeToggle", "ModeratedComment", "UserProfile",
    "ContentStats", "RejectRequest",
    "FeaturedUpdate", "PostCreate", "PostUpdate", "PostView", "TagView",
    "TopTag",
]
