# src/petboard/models/__init__.py
"""SQLAlchemy models for the Petboard application."""

from .comment import Comment
from .follow import Follow
from .like import PostLike
from .post import Category, Post, PostStatus
from .tag import PostTag, Tag
from .user import User

__all__ = [
    "Comment",
    "Follow",
    "PostLike",
    "Category", "Post", "PostStatus",
    "PostTag", "Tag",
    "User",
]
