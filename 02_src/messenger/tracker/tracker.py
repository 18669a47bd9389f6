"""UpdateTracker: remembers which users have unseen activity."""

from typing import Protocol

from ..event_bus import IEventBus
from ..models import DomainEvent, Topic


class IUpdateTracker(Protocol):
    """Flags users with new messages or friend activity."""

    def mark(self, user_id: str) -> None:
        """Flag a user as having new items."""
        ...

    def has_updates(self, user_id: str) -> bool:
        """Check-and-clear the flag for a user."""
        ...


class UpdateTracker:
    """Tracks new items via EventBus subscription and direct mark() calls."""

    def __init__(self, event_bus: IEventBus):
        self._event_bus = event_bus
        self._pending: set[str] = set()

    async def start(self) -> None:
        """Subscribe to all EventBus topics."""
        for topic in Topic:
            self._event_bus.subscribe(topic, self._handle_event)

    async def _handle_event(self, event: DomainEvent) -> None:
        """Flag the users an event concerns."""
        payload = event.payload

        if event.topic == Topic.FRIEND_REQUEST_SENT:
            self.mark(payload["recipient_id"])
        elif event.topic == Topic.FRIEND_REQUEST_ACCEPTED:
            self.mark(payload["requester_id"])
        elif event.topic == Topic.MESSAGE_CREATED:
            for user_id in payload.get("participant_ids", []):
                if user_id != payload["sender_id"]:
                    self.mark(user_id)

    def mark(self, user_id: str) -> None:
        """Flag a user as having new items."""
        self._pending.add(user_id)

    def has_updates(self, user_id: str) -> bool:
        """Check-and-clear the flag for a user."""
        if user_id in self._pending:
            self._pending.discard(user_id)
            return True
        return False

    def clear(self) -> None:
        """Forget all pending flags."""
        self._pending.clear()
