"""EventBus implementation for pub/sub of domain events."""

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Protocol

from ..ids import generate_id
from ..logging_config import get_logger
from ..models import DomainEvent, Topic

logger = get_logger(__name__)


TopicHandler = Callable[[DomainEvent], Awaitable[None]]


class IEventBus(Protocol):
    """In-memory pub/sub for domain events."""

    def subscribe(self, topic: Topic, handler: TopicHandler) -> None:
        """Subscribe a handler to a topic."""
        ...

    async def publish(self, topic: Topic, payload: dict, source: str) -> DomainEvent:
        """Build a DomainEvent and deliver it to subscribers."""
        ...


class EventBus:
    """In-memory pub/sub event bus."""

    def __init__(self):
        self._subscribers: dict[Topic, list[TopicHandler]] = {
            topic: [] for topic in Topic
        }

    def subscribe(self, topic: Topic, handler: TopicHandler) -> None:
        """Subscribe a handler to a topic."""
        self._subscribers[topic].append(handler)

    async def publish(self, topic: Topic, payload: dict, source: str) -> DomainEvent:
        """Build a DomainEvent and deliver it to subscribers.

        Handler errors are logged and never reach the publisher.
        """
        event = DomainEvent(
            id=generate_id(),
            topic=topic,
            payload=payload,
            source=source,
            timestamp=datetime.now(timezone.utc),
        )

        handlers = self._subscribers.get(topic, [])

        # Call all handlers concurrently
        if handlers:
            results = await asyncio.gather(
                *[handler(event) for handler in handlers],
                return_exceptions=True,
            )

            for i, result in enumerate(results):
                if isinstance(result, Exception):
                    logger.error(
                        "Error in %s handler %s: %s", topic.value, i, result
                    )

        return event
