"""MessageLog implementation."""

from datetime import datetime, timezone
from typing import Any, Protocol

from ..event_bus import IEventBus
from ..ids import generate_id
from ..logging_config import get_logger
from ..models import Attachment, Message, ReadReceipt, Topic
from ..storage import Database

logger = get_logger(__name__)

# Fields a generic update may touch
UPDATABLE_FIELDS = frozenset({"content", "attachments", "metadata", "read"})


class IMessageLog(Protocol):
    """Messages of all conversations, read receipts and search."""

    async def create(
        self,
        sender_id: str,
        conversation_id: str,
        content: str,
        attachments: list[Attachment] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Message:
        """Append a message and bump the conversation's last_message_at."""
        ...

    async def find_by_id(self, message_id: str) -> Message | None:
        """Get a message by ID."""
        ...

    async def find_by_conversation_id(
        self,
        conversation_id: str,
        limit: int = 50,
        before: datetime | None = None,
    ) -> list[Message]:
        """Get a page of messages, newest first."""
        ...

    async def update(self, message_id: str, **changes: Any) -> Message | None:
        """Merge changes into a message."""
        ...

    async def delete(self, message_id: str) -> bool:
        """Delete a message."""
        ...

    async def mark_as_read(self, message_id: str, user_id: str) -> Message | None:
        """Add a read receipt for user_id unless one exists."""
        ...

    async def mark_all_as_read(self, conversation_id: str, user_id: str) -> int:
        """Mark every unread message of a conversation read by user_id."""
        ...

    async def get_unread_count(self, conversation_id: str, user_id: str) -> int:
        """Count messages of a conversation user_id has not read."""
        ...

    async def get_unread_counts(
        self, conversation_ids: list[str], user_id: str
    ) -> dict[str, int]:
        """Unread counts per conversation, omitting conversations with none."""
        ...

    async def get_latest_by_conversations(
        self, conversation_ids: list[str], limit: int = 1
    ) -> dict[str, list[Message]]:
        """Newest `limit` messages of each conversation."""
        ...

    async def search_by_content(
        self, term: str, conversation_id: str | None = None
    ) -> list[Message]:
        """Case-insensitive substring search, newest first."""
        ...


class MessageLog:
    """Messages stored in the snapshot, queried by linear scan."""

    def __init__(self, db: Database, event_bus: IEventBus | None = None):
        self._db = db
        self._event_bus = event_bus

    async def create(
        self,
        sender_id: str,
        conversation_id: str,
        content: str,
        attachments: list[Attachment] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Message:
        """Append a message and bump the conversation's last_message_at.

        An unknown conversation id is not an error; the message is stored
        without touching any conversation.
        """
        now = datetime.now(timezone.utc)
        message = Message(
            id=generate_id(),
            sender_id=sender_id,
            conversation_id=conversation_id,
            content=content,
            created_at=now,
            updated_at=now,
            attachments=list(attachments or []),
            metadata=metadata or {},
            read=[],
        )
        for attachment in message.attachments:
            attachment.message_id = message.id

        participant_ids: list[str] = []
        async with self._db.transaction() as snapshot:
            snapshot.messages.append(message)
            for conversation in snapshot.conversations:
                if conversation.id == conversation_id:
                    conversation.last_message_at = now
                    participant_ids = list(conversation.participant_ids)
                    break
            self._db.mark_dirty()

        if self._event_bus:
            await self._event_bus.publish(
                Topic.MESSAGE_CREATED,
                {
                    "message_id": message.id,
                    "conversation_id": conversation_id,
                    "sender_id": sender_id,
                    "participant_ids": participant_ids,
                },
                source="message_log",
            )

        return message

    async def find_by_id(self, message_id: str) -> Message | None:
        """Get a message by ID."""
        for message in self._db.snapshot.messages:
            if message.id == message_id:
                return message
        return None

    async def find_by_conversation_id(
        self,
        conversation_id: str,
        limit: int = 50,
        before: datetime | None = None,
    ) -> list[Message]:
        """Get a page of messages, newest first.

        Page backwards by passing the created_at of the oldest message seen
        as `before`; only messages strictly older are returned.
        """
        messages = [
            m for m in self._db.snapshot.messages if m.conversation_id == conversation_id
        ]
        if before:
            messages = [m for m in messages if m.created_at < before]

        return self._newest_first(messages)[:limit]

    async def update(self, message_id: str, **changes: Any) -> Message | None:
        """Merge changes into a message.

        Raises:
            ValueError: a field outside UPDATABLE_FIELDS was given.
        """
        invalid = set(changes) - UPDATABLE_FIELDS
        if invalid:
            raise ValueError(f"Cannot update message fields: {sorted(invalid)}")

        async with self._db.transaction():
            message = await self.find_by_id(message_id)
            if not message:
                return None

            for key, value in changes.items():
                setattr(message, key, value)
            message.updated_at = datetime.now(timezone.utc)
            self._db.mark_dirty()

        return message

    async def delete(self, message_id: str) -> bool:
        """Delete a message."""
        async with self._db.transaction() as snapshot:
            remaining = [m for m in snapshot.messages if m.id != message_id]
            if len(remaining) == len(snapshot.messages):
                return False
            snapshot.messages = remaining
            self._db.mark_dirty()
        return True

    async def mark_as_read(self, message_id: str, user_id: str) -> Message | None:
        """Add a read receipt for user_id unless one exists."""
        async with self._db.transaction():
            message = await self.find_by_id(message_id)
            if not message:
                return None

            if not message.is_read_by(user_id):
                message.read.append(
                    ReadReceipt(user_id=user_id, at=datetime.now(timezone.utc))
                )
                self._db.mark_dirty()

        return message

    async def mark_all_as_read(self, conversation_id: str, user_id: str) -> int:
        """Mark every unread message of a conversation read by user_id.

        Returns the number of messages newly marked.
        """
        now = datetime.now(timezone.utc)
        marked = 0
        async with self._db.transaction() as snapshot:
            for message in snapshot.messages:
                if message.conversation_id == conversation_id and not message.is_read_by(user_id):
                    message.read.append(ReadReceipt(user_id=user_id, at=now))
                    marked += 1
            if marked:
                self._db.mark_dirty()

        return marked

    async def get_unread_count(self, conversation_id: str, user_id: str) -> int:
        """Count messages of a conversation user_id has not read."""
        return sum(
            1
            for m in self._db.snapshot.messages
            if m.conversation_id == conversation_id and not m.is_read_by(user_id)
        )

    async def get_unread_counts(
        self, conversation_ids: list[str], user_id: str
    ) -> dict[str, int]:
        """Unread counts per conversation, omitting conversations with none."""
        counts = {}
        for conversation_id in conversation_ids:
            count = await self.get_unread_count(conversation_id, user_id)
            if count > 0:
                counts[conversation_id] = count
        return counts

    async def get_latest_by_conversations(
        self, conversation_ids: list[str], limit: int = 1
    ) -> dict[str, list[Message]]:
        """Newest `limit` messages of each conversation (inbox previews)."""
        return {
            conversation_id: await self.find_by_conversation_id(conversation_id, limit)
            for conversation_id in conversation_ids
        }

    async def search_by_content(
        self, term: str, conversation_id: str | None = None
    ) -> list[Message]:
        """Case-insensitive substring search, newest first."""
        needle = term.lower()
        messages = [
            m for m in self._db.snapshot.messages if needle in m.content.lower()
        ]
        if conversation_id:
            messages = [m for m in messages if m.conversation_id == conversation_id]

        return self._newest_first(messages)

    @staticmethod
    def _newest_first(messages: list[Message]) -> list[Message]:
        # Equal timestamps: later insertion sorts first
        return sorted(reversed(messages), key=lambda m: m.created_at, reverse=True)
