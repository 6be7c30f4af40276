# src/petboard/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .interactions import router as interactions_router
from .moderation import router as moderation_router
from .posts import router as posts_router
from .tags import router as tags_router
from .users import router as users_router

__all__ = [
    "interactions_router",
    "moderation_router",
    "posts_router",
    "tags_router",
    "users_router",
]
