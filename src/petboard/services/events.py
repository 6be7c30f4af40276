"""Domain events published by the content services.

Services publish an event after their transaction commits. Persisting an audit
trail is up to subscribers; the default bus only logs.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from petboard.db.time import utcnow

logger = logging.getLogger(__name__)

POST_CREATED = "post.created"
POST_UPDATED = "post.updated"
POST_DELETED = "post.deleted"
POST_FEATURED = "post.featured"
POST_APPROVED = "post.approved"
POST_REJECTED = "post.rejected"
LIKE_TOGGLED = "like.toggled"
FOLLOW_TOGGLED = "follow.toggled"
COMMENT_ADDED = "comment.added"
COMMENT_DELETED = "comment.deleted"


@dataclass(frozen=True)
class DomainEvent:
    """Something that happened to the content store."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=utcnow)


Subscriber = Callable[[DomainEvent], None]


def log_event(event: DomainEvent) -> None:
    """Default subscriber: write the event to the module logger."""
    logger.info("%s %s", event.name, event.payload)


class EventBus:
    """Synchronous fan-out of domain events to subscribers."""

    def __init__(self, subscribers: list[Subscriber] | None = None) -> None:
        self._subscribers: list[Subscriber] = (
            list(subscribers) if subscribers is not None else [log_event]
        )

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def publish(self, name: str, **payload: Any) -> DomainEvent:
        """Deliver an event to every subscriber.

        A failing subscriber is logged and skipped; it never undoes the
        already-committed change that produced the event.
        """
        event = DomainEvent(name=name, payload=payload)
        for subscriber in self._subscribers:
            try:
                subscriber(event)
            except Exception:
                logger.error("Event subscriber failed for %s", name, exc_info=True)
        return event
