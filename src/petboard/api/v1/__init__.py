# src/petboard/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    interactions_router,
    moderation_router,
    posts_router,
    tags_router,
    users_router,
)

__all__ = [
    "interactions_router",
    "moderation_router",
    "posts_router",
    "tags_router",
    "users_router",
]
