# src/petboard/services/__init__.py
"""Business logic services for the Petboard application."""

from .events import DomainEvent, EventBus
from .feed import FeedQueryEngine
from .interactions import InteractionLedger
from .moderation import ModerationWorkflow, can_delete, can_update, ensure_can_modify
from .post_service import PostStore
from .tags import TagRegistry, normalize_tag_name

__all__ = [
    "DomainEvent",
    "EventBus",
    "FeedQueryEngine",
    "InteractionLedger",
    "ModerationWorkflow",
    "PostStore",
    "TagRegistry",
    "can_delete",
    "can_update",
    "ensure_can_modify",
    "normalize_tag_name",
]
