"""Conversation data model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Conversation:
    """A direct (two users, no name) or group conversation."""

    id: str
    participant_ids: list[str]
    is_group: bool
    created_at: datetime
    updated_at: datetime
    name: str | None = None
    last_message_at: datetime | None = None

    @property
    def activity_at(self) -> datetime:
        """Timestamp used to order conversations by recency."""
        return self.last_message_at or self.updated_at
